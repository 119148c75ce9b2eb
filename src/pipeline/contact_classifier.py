"""Decide which clients are missing contact details."""
from src.models.contact import ClassifiedRecord, ContactInfo


def describe_missing(email: str, phone: str) -> str:
    """Name the absent contact fields, phone first, separated by a space."""
    tokens = []
    if not phone:
        tokens.append("Phone")
    if not email:
        tokens.append("Email")
    return " ".join(tokens)


def classify(name: str, info: ContactInfo) -> ClassifiedRecord | None:
    """Return a ClassifiedRecord when email or phone is empty, otherwise None."""
    if info.email and info.phone:
        return None

    return ClassifiedRecord(
        name=name,
        segmentation=info.segmentation,
        missing_description=describe_missing(info.email, info.phone),
    )
