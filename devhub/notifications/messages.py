"""Plain-text message composition for each notification event."""

from __future__ import annotations

from devhub.notifications.mailer import OutgoingMail

SITE_NAME = "Web Dev Hub"


def contact_admin_notification(contact: dict, admin_recipient: str) -> OutgoingMail:
    return OutgoingMail(
        to=admin_recipient,
        subject=f"New Contact: {contact['subject']}",
        body=(
            f"New contact form submission on {SITE_NAME}.\n\n"
            f"From: {contact['name']} <{contact['email']}>\n"
            f"Subject: {contact['subject']}\n\n"
            f"{contact['message']}\n"
        ),
        reply_to=contact["email"],
    )


def contact_auto_reply(contact: dict) -> OutgoingMail:
    return OutgoingMail(
        to=contact["email"],
        subject=f"Thank you for contacting us - {contact['subject']}",
        body=(
            f"Hi {contact['name']},\n\n"
            f"Thanks for reaching out to {SITE_NAME}. We received your message "
            f"and will get back to you soon.\n\n"
            f"Your message:\n{contact['message']}\n"
        ),
    )


def contact_custom_reply(contact: dict, reply_message: str) -> OutgoingMail:
    return OutgoingMail(
        to=contact["email"],
        subject=f"Re: {contact['subject']}",
        body=(
            f"Hi {contact['name']},\n\n"
            f"{reply_message}\n\n"
            f"-- \n{SITE_NAME}\n\n"
            f"> {contact['message']}\n"
        ),
    )


def engagement_notification(event_kind: str, payload: dict, recipient: str, author_name: str) -> OutgoingMail:
    if event_kind == "comment.added":
        subject = f'New Comment on "{payload["item_title"]}"'
        what = "commented on your post"
    else:
        subject = f'New Reply in "{payload["item_title"]}"'
        what = "replied to your thread"
    return OutgoingMail(
        to=recipient,
        subject=subject,
        body=(
            f"{author_name} {what} \"{payload['item_title']}\":\n\n"
            f"{payload['text']}\n"
        ),
    )
