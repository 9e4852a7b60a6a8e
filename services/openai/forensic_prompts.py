"""Prompt builders for image authenticity analysis."""

def build_system_prompt() -> str:
    """Return the system prompt for the forensic examiner."""
    return (
        "You are a digital image forensics examiner. "
        "You decide whether an image is an authentic camera capture, fully AI-generated, "
        "or a real photograph that has been manipulated. "
        "You are calibrated and conservative: report low confidence when the evidence is weak."
    )


def build_user_prompt() -> str:
    """Return the fixed forensic instruction sent with every image."""
    return (
        "Examine the attached image for signs of synthesis or manipulation: diffusion artifacts, "
        "GAN fingerprints, lighting and shadow inconsistencies, anatomical errors (hands, teeth, eyes), "
        "garbled or malformed text, repeated or overly smooth textures, unnatural sensor noise, "
        "compression anomalies and edit boundaries. "
        "Classify the image as 'real', 'ai-generated' or 'manipulated', give a confidence between 0 and 1, "
        "a concise rationale, and list every artifact you detected with its category. "
        "Report the verdict by calling the provided function."
    )
