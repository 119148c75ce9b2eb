"""Pull segmentation and contact values out of a task's custom fields."""
from collections.abc import Mapping

from src.models.contact import ContactInfo, Record

UNKNOWN_SEGMENTATION = "Unknown"

# Canonical key -> custom field name in the project-management tool
CONTACT_FIELD_NAMES: Mapping[str, str] = {
    "segmentation": "Lead Client Segmentation",
    "email": "HOH Email",
    "phone": "Phone Number",
}


def extract_contact_info(record: Record, field_names: Mapping[str, str] = CONTACT_FIELD_NAMES) -> ContactInfo:
    """Resolve segmentation, email and phone for a record.

    Every field is visited in order, so when a name appears more than once the
    last occurrence wins. An unset or blank segmentation becomes "Unknown";
    missing email and phone become empty strings.

    Args:
        record: Task with its custom fields
        field_names: Mapping of canonical key to source field name

    Returns:
        ContactInfo for the record
    """
    keys_by_source_name = {source: key for key, source in field_names.items()}
    values = {"segmentation": "", "email": "", "phone": ""}

    for custom_field in record.custom_fields:
        key = keys_by_source_name.get(custom_field.name)
        if key is not None:
            values[key] = (custom_field.display_value or "").strip()

    return ContactInfo(
        segmentation=values["segmentation"] or UNKNOWN_SEGMENTATION,
        email=values["email"],
        phone=values["phone"],
    )
