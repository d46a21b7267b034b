"""Abstract base class for LLM providers and the CV extraction prompt."""

from abc import ABC, abstractmethod

SYSTEM_PROMPT = (
    "You are an expert CV analyzer. Analyze the CV and extract key information "
    "in JSON format with these exact fields:\n"
    "- candidate_name: full name of the candidate\n"
    "- email_address: email address\n"
    "- contact_number: phone number\n"
    "- educational_qualifications: education details\n"
    "- job_history: work experience, one role per line with its duration\n"
    "- current_employment: current role and employer, empty if none\n"
    "- skill_set: comma-separated list of skills\n"
    "- score: overall rating out of 10 (as string)\n"
    "- justification: brief explanation of the score\n"
    "- countries: location/country information\n\n"
    "Return only valid JSON without any markdown formatting."
)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @abstractmethod
    def complete(
        self,
        cv_text: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send CV text to the LLM and return raw response text.

        Args:
            cv_text: Plain text extracted from a CV.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str:
        """Environment variable name for the API key."""
