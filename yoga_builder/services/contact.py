import logging
from dataclasses import dataclass
from string import Template

from yoga_builder.models.profile import UserProfile
from yoga_builder.schemas.profile import ContactIn


logger = logging.getLogger(__name__)


SUBJECT = Template("New message from $sender via your yoga profile")

BODY = Template(
    """Hi $instructor,

$sender ($email) sent you a message through your public profile:

$message

Reply directly to $email to get back to them.
"""
)


@dataclass(frozen=True)
class ContactEmail:
    to: str
    reply_to: str
    subject: str
    body: str


def render_contact_email(profile: UserProfile, payload: ContactIn) -> ContactEmail:
    values = {
        "instructor": profile.name or "there",
        "sender": payload.name.strip(),
        "email": str(payload.email),
        "message": payload.message.strip(),
    }
    return ContactEmail(
        to=profile.email,
        reply_to=str(payload.email),
        subject=SUBJECT.substitute(values),
        body=BODY.substitute(values),
    )


def send_contact_message(profile: UserProfile, payload: ContactIn) -> ContactEmail:
    # no mail transport is wired in, messages are only logged
    email = render_contact_email(profile, payload)
    logger.info("Contact message for %s from %s: %s", email.to, email.reply_to, email.subject)
    return email
