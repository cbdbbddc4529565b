# synergies/core/lifecycle.py
"""
Referral / commission vocabularies.

Intake status and deal stage are two independent axes: any listed value may be
set at any time by an authorized user. The only rule enforced is membership in
the allow-list, checked when a value is written.
"""

import enum


class EmployeeRole(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"  # direction / managers


class IntakeStatus(str, enum.Enum):
    UNTREATED = "non_traitee"
    CONTACTED = "contacte"
    APPOINTMENT_SET = "rdv_pris"
    VOICEMAIL_LEFT = "messagerie"
    UNREACHABLE = "injoignable"


class DealStage(str, enum.Enum):
    NEW = "nouveau"
    IN_PROGRESS = "en_cours"
    CONVERTED = "transforme"
    CLOSED_WON = "acte_recrute"  # invoiced deal or hired candidate
    NO_FOLLOW_UP = "sans_suite"


class CommissionStatus(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    PAID = "paid"


class ProjectCategory(str, enum.Enum):
    SALE = "Vente"
    PURCHASE = "Achat"
    RENTAL = "Location"
    PROPERTY_MANAGEMENT = "Gestion"
    RENTAL_AND_MANAGEMENT = "Location & Gestion"
    CONDO_SYNDIC = "Syndic"
    CORPORATE_ACCOUNTS = "Ona Entreprises"
    RECRUITMENT = "Recrutement"


class ActivityType(str, enum.Enum):
    REMINDER_SENT = "reminder_sent"
    MANAGER_REMINDER_72H = "manager_reminder_72h"
    MANAGER_NOTIFIED = "manager_notified"
    COMMISSION_VALIDATED = "commission_validated"
    COMMISSION_UNVALIDATED = "commission_unvalidated"


INTAKE_LABELS: dict[IntakeStatus, str] = {
    IntakeStatus.UNTREATED: "Non traitée",
    IntakeStatus.CONTACTED: "Contacté",
    IntakeStatus.APPOINTMENT_SET: "RDV pris",
    IntakeStatus.VOICEMAIL_LEFT: "Messagerie",
    IntakeStatus.UNREACHABLE: "Injoignable",
}

DEAL_STAGE_LABELS: dict[DealStage, str] = {
    DealStage.NEW: "Nouveau",
    DealStage.IN_PROGRESS: "En cours",
    DealStage.CONVERTED: "Transformé",
    DealStage.CLOSED_WON: "Acté / Recruté",
    DealStage.NO_FOLLOW_UP: "Sans suite",
}


def requires_commission(deal_stage: str | DealStage | None) -> bool:
    """A commission row exists only for closed-won referrals."""
    if deal_stage is None:
        return False
    try:
        return DealStage(deal_stage) is DealStage.CLOSED_WON
    except ValueError:
        return False
