# demo_mailer/services/templates.py
"""
Plain-text message bodies and envelopes for demo-request notifications.

Everything here is pure: the same ``DemoRequest`` always yields the same text.
"""
from __future__ import annotations

from dataclasses import dataclass
from email.utils import formataddr

from demo_mailer.schemas.demo_request import DemoRequest


@dataclass(frozen=True)
class Branding:
    brand_name: str = "Vonoy"

    @property
    def support_sender_name(self) -> str:
        return f"{self.brand_name} Support"

    @property
    def team_sender_name(self) -> str:
        return f"{self.brand_name} Team"


@dataclass(frozen=True)
class Envelope:
    sender: str
    recipient: str
    reply_to: str
    subject: str
    text: str


def render_support_message(d: DemoRequest) -> str:
    phone = f" or phone: {d.phone}" if d.phone else ""
    return (
        "Dear support,\n"
        "\n"
        f"The user {d.full_name} has requested a new demo.\n"
        f"You can contact them via email: {d.email}{phone}.\n"
        "\n"
        "More information:\n"
        f"- Company: {d.company_name}\n"
        f"- Country: {d.country}\n"
        f"- Industry: {d.industry}\n"
        f"- Fleet Size: {d.fleet_size}\n"
        "\n"
        "Message:\n"
        f"{d.message or '(no message)'}"
    )


def render_user_message(d: DemoRequest, branding: Branding = Branding()) -> str:
    phone = f" or {d.phone}" if d.phone else ""
    return (
        f"Hi {d.first_name},\n"
        "\n"
        f"{branding.brand_name} has received your demo request, thank you!\n"
        f"Our team will contact you shortly at {d.email}{phone}.\n"
        "\n"
        "Summary:\n"
        f"- Company: {d.company_name}\n"
        f"- Country: {d.country}\n"
        f"- Industry: {d.industry}\n"
        f"- Fleet Size: {d.fleet_size}\n"
        "\n"
        "If anything is incorrect, just reply to this email.\n"
        "\n"
        f"— {branding.team_sender_name}"
    )


def build_support_envelope(
    d: DemoRequest,
    *,
    sender_address: str,
    support_inbox: str,
    branding: Branding = Branding(),
) -> Envelope:
    return Envelope(
        sender=formataddr((branding.support_sender_name, sender_address)),
        recipient=support_inbox,
        reply_to=formataddr((d.full_name, d.email)),
        subject=f"New Demo Request — {d.full_name} ({d.company_name})",
        text=render_support_message(d),
    )


def build_user_envelope(
    d: DemoRequest,
    *,
    sender_address: str,
    support_inbox: str,
    branding: Branding = Branding(),
) -> Envelope:
    return Envelope(
        sender=formataddr((branding.team_sender_name, sender_address)),
        recipient=formataddr((d.full_name, d.email)),
        reply_to=support_inbox,
        subject=f"Thanks {d.first_name}, we received your demo request",
        text=render_user_message(d, branding),
    )
