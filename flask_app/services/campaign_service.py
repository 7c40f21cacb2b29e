# flask_app/services/campaign_service.py
"""
Campaign distribution: split a set of contacts among staff and create one task
per staff member.

Ownership is deterministic: a contact belongs to the first staff member in its
assignment list. Unassigned contacts are left out of the campaign.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence, TypeVar

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flask_app.models import Contact, Task, TaskFeedback, User, db
from flask_app.services.errors import NotFoundError, PersistenceFailure, ValidationError
from flask_app.utils.metrics import record_campaign

ContactT = TypeVar("ContactT")


def owner_of(contact: Any) -> str | None:
    """First assignee of a contact, or None when it has no assignment."""
    assigned = getattr(contact, "assigned_to", None)
    if not assigned:
        return None
    for staff_id in assigned:
        if staff_id:
            return staff_id
    return None


def distribute(contacts: Iterable[ContactT]) -> dict[str, list[ContactT]]:
    """
    Build the campaign distribution map.

    Keys are exactly the staff members owning at least one contact, in order
    of first appearance; values keep the input order of their contacts.
    """
    plan: dict[str, list[ContactT]] = {}
    for contact in contacts:
        staff_id = owner_of(contact)
        if staff_id is None:
            continue
        plan.setdefault(staff_id, []).append(contact)
    return {staff_id: owned for staff_id, owned in plan.items() if owned}


@dataclass
class CampaignResult:
    """Outcome of creating a campaign."""

    name: str
    tasks: list[Task] = field(default_factory=list)
    distribution: dict[str, list[int]] = field(default_factory=dict)
    excluded_contact_ids: list[int] = field(default_factory=list)
    inactive_owners: list[str] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return bool(self.tasks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "created": self.created,
            "tasks": [task.to_dict() for task in self.tasks],
            "distribution": self.distribution,
            "excluded_contact_ids": self.excluded_contact_ids,
            "inactive_owners": self.inactive_owners,
        }


class CampaignService:
    """Turn a distribution plan into persisted tasks."""

    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    def load_contacts(self, contact_ids: Sequence[Any]) -> list[Contact]:
        """Load contacts in the caller's order; every id must exist."""
        ids: list[int] = []
        for raw in contact_ids or ():
            try:
                contact_id = int(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid contact id: {raw!r}") from None
            if contact_id not in ids:
                ids.append(contact_id)
        if not ids:
            return []

        found = {contact.id: contact for contact in self.session.query(Contact).filter(Contact.id.in_(ids)).all()}
        missing = [contact_id for contact_id in ids if contact_id not in found]
        if missing:
            raise NotFoundError(
                f"Contact(s) not found: {', '.join(str(m) for m in missing)}",
                details={"contact_ids": missing},
            )
        return [found[contact_id] for contact_id in ids]

    def create_campaign(
        self,
        *,
        name: str,
        description: str | None,
        due_date: datetime,
        contact_ids: Sequence[Any],
        created_by: str,
        tags: list[str] | None = None,
    ) -> CampaignResult:
        """
        Plan the distribution and create one task per owning staff member.

        An empty plan (no contacts, or none assigned) creates nothing and is
        not an error.

        Owners without an active account still get their task; they are listed
        in ``inactive_owners`` and logged as a warning.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Campaign name is required.")
        if due_date is None:
            raise ValidationError("Due date is required.")

        contacts = self.load_contacts(contact_ids)
        plan = distribute(contacts)
        result = CampaignResult(
            name=name,
            distribution={staff_id: [c.id for c in owned] for staff_id, owned in plan.items()},
            excluded_contact_ids=[c.id for c in contacts if owner_of(c) is None],
        )

        if not plan:
            current_app.logger.info(f"Campaign '{name}': no assigned contacts, nothing to create")
            return result

        active = User.existing_usernames(plan.keys())
        result.inactive_owners = [staff_id for staff_id in plan if staff_id not in active]
        if result.inactive_owners:
            current_app.logger.warning(
                f"Campaign '{name}': tasks assigned to inactive or unknown staff: {', '.join(result.inactive_owners)}"
            )

        try:
            for staff_id, owned in plan.items():
                task = Task(
                    title=name,
                    description=description,
                    due_date=due_date,
                    tags=list(tags or []),
                    assigned_to=staff_id,
                    created_by=created_by,
                    campaign_name=name,
                )
                for contact in owned:
                    task.feedback.append(TaskFeedback(contact_id=contact.id, assigned_to=staff_id))
                self.session.add(task)
                result.tasks.append(task)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Error creating campaign '{name}': {str(e)}", exc_info=True)
            raise PersistenceFailure(f"Could not create campaign '{name}'.") from e

        distributed = sum(len(owned) for owned in plan.values())
        current_app.logger.info(
            f"Campaign '{name}' created {len(result.tasks)} task(s) covering {distributed} contact(s)"
        )
        record_campaign(tasks_created=len(result.tasks), contacts_distributed=distributed)
        return result
