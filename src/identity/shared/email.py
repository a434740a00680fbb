"""Email address normalization and validation."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Check that the email address follows a basic valid structure.

    Enforces exactly one @, non-empty local and domain parts, a dot in the
    domain, no whitespace and no consecutive dots.
    """
    if any(ch in email for ch in (" ", "\t", "\n")):
        return False

    if email.count("@") != 1:
        return False

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        return False

    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        return False

    # Check each label in the domain for leading/trailing hyphens
    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            return False

    if "." not in domain_part:
        return False

    if ".." in local_part or ".." in domain_part:
        return False

    return not any(forbidden in email for forbidden in (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\"))
