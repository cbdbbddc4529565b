"""Subjects and HTML bodies for the outbound notifications."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape

from synergies.core.formatting import fmt_date, fmt_datetime
from synergies.core.lifecycle import DEAL_STAGE_LABELS, INTAKE_LABELS, DealStage, IntakeStatus
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation

SIGNATURE = "<p>Bonne journée,<br />Le système Synergies</p>"


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str


def _e(value: object | None, fallback: str = "-") -> str:
    if value is None or value == "":
        return escape(fallback)
    return escape(str(value))


def _intake_label(value: str | None) -> str | None:
    try:
        return INTAKE_LABELS[IntakeStatus(value)]
    except ValueError:
        return value


def _stage_label(value: str | None) -> str | None:
    try:
        return DEAL_STAGE_LABELS[DealStage(value)]
    except ValueError:
        return value


def new_recommendation(reco: Recommendation) -> EmailContent:
    subject = f"Nouvelle recommandation – {reco.client_name}"
    parts = [
        "<h2>Nouvelle recommandation</h2>",
        f"<p><b>{_e(reco.prescriber_name, 'Un collègue')}</b> vous a recommandé un client.</p>",
        f"<p><b>Client :</b> {_e(reco.client_name)}</p>",
        f"<p><b>Projet :</b> {_e(reco.project_title)}</p>",
    ]
    if reco.client_email or reco.client_phone:
        parts.append(f"<p><b>Contact :</b> {_e(reco.client_email, '')} {_e(reco.client_phone, '')}</p>")
    if reco.project_address:
        parts.append(f"<p><b>Adresse :</b> {_e(reco.project_address)}</p>")
    if reco.project_details:
        parts.append(f"<p><b>Détails :</b> {_e(reco.project_details)}</p>")
    parts.append("<hr />")
    parts.append("<p>Merci de mettre à jour le statut dans l’application.</p>")
    return EmailContent(subject=subject, html="\n".join(parts))


def intake_reminder_48h(reco: Recommendation) -> EmailContent:
    subject = f"Relance – recommandation {reco.client_name or ''}".strip()
    html = "\n".join(
        [
            "<h2>Relance automatique (48h)</h2>",
            "<p>Vous avez une recommandation en attente de prise en charge.</p>",
            f"<p><b>Client :</b> {_e(reco.client_name)}</p>",
            f"<p><b>Statut :</b> {_e(_intake_label(reco.intake_status))}</p>",
            f'<p style="opacity:.7">Créée le : {_e(fmt_datetime(reco.created_at))}</p>',
            "<hr />",
            "<p>Merci de mettre à jour le statut dans l’application.</p>",
        ]
    )
    return EmailContent(subject=subject, html=html)


def manager_escalation_72h(reco: Recommendation, receiver: Employee, manager: Employee) -> EmailContent:
    client = reco.client_name or "Client non renseigné"
    receiver_name = receiver.full_name
    subject = f"Relance 72h – recommandation non traitée ({client})"
    html = "\n".join(
        [
            f"<p>Hello {_e(manager.first_name, 'Bonjour')},</p>",
            "<p>Une recommandation est toujours en statut <strong>non traitée</strong> depuis plus de 72h.</p>",
            "<p>",
            f"<strong>Client :</strong> {_e(client)}<br />",
            f"<strong>Receveur :</strong> {_e(receiver_name, 'Non renseigné')}<br />",
            f"<strong>Date de la recommandation :</strong> {_e(fmt_datetime(reco.created_at))}",
            "</p>",
            f"<p>Merci de voir avec {_e(receiver_name, 'le collaborateur concerné')} "
            "pour qu'il mette à jour le statut dans Synergies.</p>",
            SIGNATURE,
        ]
    )
    return EmailContent(subject=subject, html=html)


def manager_closed_deal(reco: Recommendation, receiver: Employee, manager: Employee) -> EmailContent:
    client = reco.client_name or "un client"
    subject = f"Nouvelle recommandation à valider – {client}"
    html = "\n".join(
        [
            f"<p>Hello {_e(manager.first_name, 'Bonjour')},</p>",
            "<p>Tu as une nouvelle recommandation en <strong>acte recruté</strong> "
            "réalisée par un membre de ton équipe.</p>",
            "<p>",
            f"<strong>Client :</strong> {_e(client)}<br />",
            f"<strong>Receveur :</strong> {_e(receiver.full_name, 'Non renseigné')}<br />",
            f"<strong>Date de la recommandation :</strong> {_e(fmt_date(reco.created_at), 'Non renseignée')}<br />",
            f"<strong>Projet :</strong> {_e(reco.project_title, 'Projet non spécifié')}",
            "</p>",
            "<p>Merci de valider la recommandation directement dans l'application Synergies.</p>",
            SIGNATURE,
        ]
    )
    return EmailContent(subject=subject, html=html)


def prescriber_nudge(reco: Recommendation) -> EmailContent:
    subject = f"Relance – recommandation {reco.client_name or ''}".strip()
    parts = [
        "<h2>Relance</h2>",
        "<p>Bonjour, je me permets de relancer concernant la recommandation :</p>",
        f"<p><b>Client :</b> {_e(reco.client_name)}</p>",
    ]
    if reco.project_title:
        parts.append(f"<p><b>Projet :</b> {_e(reco.project_title)}</p>")
    status_line = f"{_e(_intake_label(reco.intake_status))} / {_e(_stage_label(reco.deal_stage))}"
    parts.append(f"<p><b>Statut actuel :</b> {status_line}</p>")
    parts.append("<hr/>")
    parts.append("<p>Merci de mettre à jour le statut dans l’application.</p>")
    return EmailContent(subject=subject, html="\n".join(parts))


def sign_in_code(code: str, expires_in_minutes: int) -> EmailContent:
    subject = f"Votre code de connexion Synergies : {code}"
    html = "\n".join(
        [
            "<h2>Connexion à Synergies</h2>",
            "<p>Voici votre code de connexion :</p>",
            f'<p style="font-size:24px;letter-spacing:4px"><b>{_e(code)}</b></p>',
            f"<p>Il expire dans {expires_in_minutes} minutes et ne peut servir qu’une fois.</p>",
            "<p style=\"opacity:.7\">Si vous n’avez pas demandé ce code, ignorez cet email.</p>",
            SIGNATURE,
        ]
    )
    return EmailContent(subject=subject, html=html)
