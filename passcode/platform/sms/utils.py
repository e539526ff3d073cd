def mask_phone_number(phone_number: str) -> str:
    """
    Mask phone number for display and logs.
    Example: +18452428261 -> +1******8261
    """
    if len(phone_number) <= 7:
        return phone_number
    # Show country code (+X) and last 4 digits, mask everything else
    return f'{phone_number[:2]}{"*" * (len(phone_number) - 6)}{phone_number[-4:]}'
