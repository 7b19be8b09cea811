"""Company details printed on invoices."""

import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from bizdesk.database.base import Database
from bizdesk.domain.entities import CompanySettings
from bizdesk.domain.errors import AuthenticationError, log_failure, user_not_authenticated
from bizdesk.domain.invoice import validate_form

logger = logging.getLogger(__name__)


class CompanySettingsInput(BaseModel):
    """Company settings form."""

    company_name: str = Field(..., min_length=1, max_length=100)
    company_address: Optional[str] = Field(default=None, max_length=255)

    @field_validator("company_name", "company_address", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("company_address")
    @classmethod
    def blank_address_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class CompanySettingsService:
    """Service for the signed-in user's company details."""

    def __init__(self, db: Database, user_id: Optional[str]):
        self.db = db
        self.user_id = user_id

    def load(self) -> CompanySettings:
        """Stored company details. Empty without a user or a stored row."""
        if not self.user_id:
            return CompanySettings()
        with log_failure(logger, "loading company settings"):
            return self.db.load_company_settings(self.user_id)

    def save(self, data: CompanySettingsInput | Mapping[str, Any]) -> CompanySettings:
        """Validate and store company details.

        Raises:
            FormValidationError: If the name is blank or either field is too long
            AuthenticationError: If no user is signed in
        """
        settings = validate_form(CompanySettingsInput, data, "company")
        if not self.user_id:
            raise AuthenticationError(user_not_authenticated())
        with log_failure(logger, "saving company settings"):
            stored = self.db.save_company_settings(
                self.user_id, settings.company_name, settings.company_address
            )
        logger.info("Saved company settings for %s", stored.company_name)
        return stored
