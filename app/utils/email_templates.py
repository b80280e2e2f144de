# app/utils/email_templates.py
from datetime import datetime
from html import escape
from typing import Optional

APP_NAME = "Practice Administration"


def render_email_template(
    title: str,
    body_html: str,
    cta_text: Optional[str] = None,
    cta_url: Optional[str] = None,
) -> str:
    """
    Render a unified HTML email template with header, body, optional CTA button, and footer.
    """
    cta_section = ""
    if cta_text and cta_url:
        cta_section = f"""
        <div style="text-align: center; margin: 30px 0;">
            <a href="{escape(cta_url, quote=True)}" style="
                display: inline-block;
                padding: 12px 30px;
                background-color: #1d7af3;
                color: #ffffff;
                text-decoration: none;
                border-radius: 6px;
                font-weight: 600;
            ">{escape(cta_text)}</a>
        </div>
        """

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{escape(title)}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333333; background-color: #f5f7fb;">
    <table role="presentation" style="width: 100%; max-width: 600px; margin: 0 auto; background-color: #ffffff;">
        <tr>
            <td style="padding: 30px; background-color: #1d7af3; text-align: center;">
                <h1 style="color: #ffffff; margin: 0; font-size: 22px;">{APP_NAME}</h1>
            </td>
        </tr>
        <tr>
            <td style="padding: 30px;">
                <h2 style="color: #1d7af3; margin: 0 0 20px 0; font-size: 20px;">{escape(title)}</h2>
                <div style="color: #555555; font-size: 16px;">
                    {body_html}
                </div>
                {cta_section}
            </td>
        </tr>
        <tr>
            <td style="padding: 20px; background-color: #f5f7fb; text-align: center; font-size: 12px; color: #888888;">
                <p style="margin: 0;">&copy; {datetime.now().year} {APP_NAME}. This is an automated message.</p>
            </td>
        </tr>
    </table>
</body>
</html>
"""


def _appointment_details(
    scheduled_at: datetime,
    is_teleconsultation: bool,
    meeting_url: Optional[str],
    notes: Optional[str],
) -> str:
    consultation_type = "Teleconsultation" if is_teleconsultation else "In-person consultation"
    items = [
        f"<li><strong>Date and Time:</strong> {scheduled_at:%Y-%m-%d %H:%M} UTC</li>",
        f"<li><strong>Type:</strong> {consultation_type}</li>",
    ]
    if meeting_url:
        url = escape(meeting_url, quote=True)
        items.append(f'<li><strong>Meeting Link:</strong> <a href="{url}">{url}</a></li>')
    if notes:
        items.append(f"<li><strong>Notes:</strong> {escape(notes)}</li>")
    return "<ul>" + "".join(items) + "</ul>"


def render_patient_appointment_email(
    *,
    patient_name: str,
    doctor_name: Optional[str],
    scheduled_at: datetime,
    is_teleconsultation: bool = False,
    meeting_url: Optional[str] = None,
    notes: Optional[str] = None,
) -> tuple[str, str]:
    """
    Appointment confirmation for the patient.
    Returns (subject, html_body).
    """
    subject = "Appointment Confirmation"
    with_doctor = f" with Dr. {escape(doctor_name)}" if doctor_name else ""
    body_html = f"""
    <p>Dear {escape(patient_name)},</p>
    <p>Your appointment has been scheduled{with_doctor}.</p>
    <p><strong>Details:</strong></p>
    {_appointment_details(scheduled_at, is_teleconsultation, meeting_url, notes)}
    <p>If you need to reschedule or cancel your appointment, please contact us as soon as possible.</p>
    """
    return subject, render_email_template(title=subject, body_html=body_html)


def render_doctor_appointment_email(
    *,
    doctor_name: str,
    patient_name: str,
    scheduled_at: datetime,
    is_teleconsultation: bool = False,
    meeting_url: Optional[str] = None,
    notes: Optional[str] = None,
) -> tuple[str, str]:
    """
    New-booking notice for the doctor.
    Returns (subject, html_body).
    """
    subject = "New Appointment Scheduled"
    body_html = f"""
    <p>Dear Dr. {escape(doctor_name)},</p>
    <p>A new appointment has been scheduled with patient {escape(patient_name)}.</p>
    <p><strong>Details:</strong></p>
    {_appointment_details(scheduled_at, is_teleconsultation, meeting_url, notes)}
    """
    return subject, render_email_template(title=subject, body_html=body_html)
