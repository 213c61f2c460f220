from .company_profile import COMPANY_PROFILE_PROMPT, format_profile_prompt

__all__ = ["COMPANY_PROFILE_PROMPT", "format_profile_prompt"]
