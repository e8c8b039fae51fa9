"""Intake form definitions and normalisation of form responses.

Organizations collect mentor and mentee profiles through custom forms. A form
template is a list of fields; only the choice-style fields carry a list of
options. Submitted responses are validated against the template and then
folded into a single typed :class:`~mentor_match.core.models.Mentor` or
:class:`~mentor_match.core.models.Mentee` record, so nothing downstream has
to look in two places for the same attribute.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .models import Mentee, Mentor


class FieldOption(BaseModel):
    value: str
    label: str


class _BaseField(BaseModel):
    id: str
    label: str
    placeholder: str | None = None
    required: bool = False


class TextField(_BaseField):
    type: Literal["text", "textarea", "email", "number"]
    default_value: str | int | float | None = None


class ChoiceField(_BaseField):
    type: Literal["select", "multiselect", "radio", "checkbox"]
    options: list[FieldOption] = Field(min_length=1)
    default_value: str | list[str] | bool | None = None

    @property
    def multiple(self) -> bool:
        return self.type in ("multiselect", "checkbox")

    def option_values(self) -> set[str]:
        return {o.value for o in self.options}


FormField = Annotated[Union[TextField, ChoiceField], Field(discriminator="type")]


class FormTemplate(BaseModel):
    id: int | None = None
    organization_id: int
    name: str
    type: Literal["mentor", "mentee"]
    fields: list[FormField] = Field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


def validate_responses(template: FormTemplate, responses: dict[str, Any]) -> list[str]:
    """Return a list of problems with ``responses``; empty when valid."""
    errors: list[str] = []
    for field in template.fields:
        value = responses.get(field.id)
        if _is_blank(value):
            if field.required:
                errors.append(f"{field.label} is required.")
            continue
        if isinstance(field, ChoiceField):
            # a lone checkbox answers yes/no
            if field.type == "checkbox" and isinstance(value, bool):
                continue
            chosen = value if isinstance(value, list) else [value]
            if not field.multiple and len(chosen) > 1:
                errors.append(f"{field.label} accepts a single choice.")
            invalid = [str(v) for v in chosen if str(v) not in field.option_values()]
            if invalid:
                errors.append(f"{field.label} has invalid choice(s): {', '.join(invalid)}.")
        elif field.type == "number":
            try:
                float(value)
            except (TypeError, ValueError):
                errors.append(f"{field.label} must be a number.")
        elif field.type == "email" and "@" not in str(value):
            errors.append(f"{field.label} must be an email address.")
    return errors


# Response keys that map onto typed profile attributes. Forms are built by
# administrators, so the same attribute shows up under several ids.
_ALIASES: dict[str, str] = {
    "fullName": "name",
    "full_name": "name",
    "meetingFormat": "preferred_meeting_format",
    "preferredMeetingFormat": "preferred_meeting_format",
    "meeting_format": "preferred_meeting_format",
    "yearsOfExperience": "years_of_experience",
    "experience": "years_of_experience",
    "bookingLink": "booking_link",
    "company": "organization",
    "skills": "expertise",
}

_LIST_FIELDS = {"expertise", "interests", "availability"}
# never taken from a submitted form
_PROTECTED = {"id", "organization_id", "active", "approved", "welcome_email_sent"}


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _merge(model: type[BaseModel], record: dict[str, Any], responses: dict[str, Any]) -> dict[str, Any]:
    known = set(model.model_fields)
    merged = {k: v for k, v in record.items() if k in known}
    for key, value in responses.items():
        name = _ALIASES.get(key, key)
        if name not in known or name in _PROTECTED or _is_blank(value):
            continue
        if name in _LIST_FIELDS:
            merged[name] = _as_list(value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            merged[name] = str(value)
        else:
            merged[name] = value
    return merged


def mentor_from_responses(record: dict[str, Any], responses: dict[str, Any] | None = None) -> Mentor:
    """Build a :class:`Mentor` from typed columns and a form response bag.

    Values found in ``responses`` take precedence over the typed columns in
    ``record``. Response keys that do not correspond to a profile attribute
    are dropped.
    """
    return Mentor(**_merge(Mentor, record, responses or {}))


def mentee_from_responses(record: dict[str, Any], responses: dict[str, Any] | None = None) -> Mentee:
    """Build a :class:`Mentee` the same way as :func:`mentor_from_responses`."""
    return Mentee(**_merge(Mentee, record, responses or {}))
