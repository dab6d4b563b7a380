from __future__ import annotations

from dataclasses import dataclass
from html import escape

from core.config import AppSettings
from models.booking import Booking


@dataclass(frozen=True)
class RenderedEmail:
    to: str
    subject: str
    text: str
    html: str


_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }
.content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
.box { background: white; padding: 20px; border-radius: 8px; margin: 20px 0; }
.cta-button { display: inline-block; background: #d4af37; color: white; padding: 12px 30px; text-decoration: none; border-radius: 25px; margin: 20px 0; }
.footer { text-align: center; margin-top: 30px; color: #666; font-size: 14px; }
"""


def _page(cfg: AppSettings, title: str, body: str) -> str:
    salon = escape(cfg.salon_name)
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)} - {salon}</title><style>{_STYLE}</style></head>"
        f"<body><div class=\"container\"><div class=\"header\"><h1>{salon}</h1><h2>{escape(title)}</h2></div>"
        f"<div class=\"content\">{body}</div>"
        f"<div class=\"footer\"><p>Thank you for choosing {salon}!</p></div></div></body></html>"
    )


def _location(cfg: AppSettings) -> str:
    return (
        f"<h3>Location</h3><p>{escape(cfg.salon_name)}<br>{escape(cfg.salon_address)}</p>"
        f"<h3>Contact</h3><p>Phone: {escape(cfg.salon_phone)}<br>Email: {escape(cfg.salon_email)}</p>"
    )


def _notes_line(booking: Booking, label: str) -> str:
    return f"<p><strong>{label}:</strong> {escape(booking.notes)}</p>" if booking.notes else ""


def booking_created(booking: Booking, cfg: AppSettings) -> RenderedEmail:
    s = booking.service
    title = "Your Appointment is Confirmed!"
    details = (
        f"<p><strong>Date:</strong> {booking.formatted_date}</p>"
        f"<p><strong>Time:</strong> {booking.formatted_time}</p>"
        f"<p><strong>Booking ID:</strong> {booking.id}</p>"
        f"<h4>{escape(s.name)}</h4>"
        f"<p><strong>Duration:</strong> {escape(s.duration.label or '')}</p>"
        f"<p><strong>Price:</strong> ${s.price:.2f}</p>"
        f"<p><strong>Category:</strong> {escape(s.category)}</p>"
        + _notes_line(booking, "Special Requests")
    )
    body = (
        f"<p>Dear <strong>{escape(booking.client_name)}</strong>,</p>"
        f"<p>Thank you for choosing {escape(cfg.salon_name)}! We're excited to confirm your appointment.</p>"
        f"<div class=\"box\"><h3>Appointment Details</h3>{details}</div>"
        + _location(cfg)
        + "<h3>Important Reminders</h3><ul>"
        "<li>Please arrive 10 minutes before your appointment time</li>"
        "<li>Cancellations must be made 24 hours in advance</li></ul>"
        f"<p style=\"text-align:center\"><a class=\"cta-button\" href=\"{cfg.frontend_base_url}/bookings/{booking.id}\">View Booking Details</a></p>"
    )
    text = (
        f"Dear {booking.client_name},\n\n"
        f"Your {s.name} appointment on {booking.formatted_date} at {booking.formatted_time} is booked.\n"
        f"Booking ID: {booking.id}\nPrice: ${s.price:.2f}\n\n{cfg.salon_name}, {cfg.salon_address}\n"
    )
    return RenderedEmail(
        to=booking.client_email,
        subject=f"Your Appointment is Confirmed - {cfg.salon_name}",
        text=text,
        html=_page(cfg, title, body),
    )


def booking_reminder(booking: Booking, cfg: AppSettings) -> RenderedEmail:
    s = booking.service
    body = (
        f"<p>Dear <strong>{escape(booking.client_name)}</strong>,</p>"
        "<p>This is a friendly reminder about your appointment tomorrow.</p>"
        f"<div class=\"box\"><h3>Your Appointment</h3>"
        f"<p><strong>Date:</strong> {booking.formatted_date}</p>"
        f"<p><strong>Time:</strong> {booking.formatted_time}</p>"
        f"<p><strong>Service:</strong> {escape(s.name)}</p>"
        f"<p><strong>Duration:</strong> {escape(s.duration.label or '')}</p></div>"
        + _location(cfg)
        + "<h3>Need to Reschedule?</h3><p>Please contact us at least 24 hours in advance.</p>"
    )
    text = (
        f"Dear {booking.client_name},\n\nReminder: {s.name} tomorrow, "
        f"{booking.formatted_date} at {booking.formatted_time}.\n\nCall us at {cfg.salon_phone} to reschedule.\n"
    )
    return RenderedEmail(
        to=booking.client_email,
        subject=f"Reminder: Your Appointment Tomorrow - {cfg.salon_name}",
        text=text,
        html=_page(cfg, "Appointment Reminder", body),
    )


def booking_cancelled(booking: Booking, cfg: AppSettings) -> RenderedEmail:
    body = (
        f"<p>Dear <strong>{escape(booking.client_name)}</strong>,</p>"
        "<p>Your appointment has been cancelled as requested.</p>"
        f"<div class=\"box\"><h3>Cancelled Appointment</h3>"
        f"<p><strong>Date:</strong> {booking.formatted_date}</p>"
        f"<p><strong>Time:</strong> {booking.formatted_time}</p>"
        f"<p><strong>Service:</strong> {escape(booking.service.name)}</p>"
        f"<p><strong>Booking ID:</strong> {booking.id}</p></div>"
        "<h3>Book a New Appointment</h3><p>We'd love to see you again!</p>"
        f"<p style=\"text-align:center\"><a class=\"cta-button\" href=\"{cfg.frontend_base_url}/booking\">Book New Appointment</a></p>"
    )
    text = (
        f"Dear {booking.client_name},\n\nYour {booking.service.name} appointment on "
        f"{booking.formatted_date} at {booking.formatted_time} has been cancelled.\n"
    )
    return RenderedEmail(
        to=booking.client_email,
        subject=f"Appointment Cancelled - {cfg.salon_name}",
        text=text,
        html=_page(cfg, "Appointment Cancelled", body),
    )


def admin_new_booking(booking: Booking, cfg: AppSettings) -> RenderedEmail:
    s = booking.service
    body = (
        "<p>A new booking has been received and requires your attention.</p>"
        "<div class=\"box\"><h3>Booking Details</h3>"
        f"<p><strong>Client:</strong> {escape(booking.client_name)}</p>"
        f"<p><strong>Email:</strong> {escape(booking.client_email)}</p>"
        f"<p><strong>Phone:</strong> {escape(booking.client_phone)}</p>"
        f"<p><strong>Service:</strong> {escape(s.name)}</p>"
        f"<p><strong>Date:</strong> {booking.formatted_date}</p>"
        f"<p><strong>Time:</strong> {booking.formatted_time}</p>"
        f"<p><strong>Price:</strong> ${s.price:.2f}</p>"
        f"<p><strong>Status:</strong> {escape(str(booking.status))}</p>"
        + _notes_line(booking, "Notes")
        + "</div>"
        f"<p style=\"text-align:center\"><a class=\"cta-button\" href=\"{cfg.frontend_base_url}/admin/bookings/{booking.id}\">View in Admin Panel</a></p>"
    )
    text = (
        f"New booking {booking.id}: {booking.client_name} <{booking.client_email}>, {booking.client_phone}\n"
        f"{s.name} on {booking.formatted_date} at {booking.formatted_time} (${s.price:.2f})\n"
    )
    return RenderedEmail(
        to=cfg.admin_email,
        subject=f"New Booking Received - {cfg.salon_name}",
        text=text,
        html=_page(cfg, "New Booking Received", body),
    )
