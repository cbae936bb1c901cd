"""
Socle commun des entités persistées.

Les documents JSON utilisent des clés camelCase (createdAt, seasonNumber),
les attributs Python restent en snake_case. Chaque entité se valide à la
construction ; parse_model convertit les erreurs pydantic en ValidationError
du domaine avec le détail par champ.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Optional, TypeVar
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    PlainSerializer,
    ValidationInfo,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from streamvault.core.errors import ValidationError
from streamvault.utils.constants import DEFAULT_ALLOWED_VIDEO_DOMAINS
from streamvault.utils.helpers import format_timestamp

ModelT = TypeVar("ModelT", bound="StoredModel")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError("Invalid url")
    return value


def _check_stream_url(value: str, info: ValidationInfo) -> str:
    """URL http(s) dont l'hôte est un domaine autorisé ou l'un de ses sous-domaines."""
    _check_url(value)
    allowed: Iterable[str] = DEFAULT_ALLOWED_VIDEO_DOMAINS
    if info.context and info.context.get("allowed_domains") is not None:
        allowed = info.context["allowed_domains"]
    hostname = urlparse(value).hostname or ""
    if not any(hostname == domain or hostname.endswith(f".{domain}") for domain in allowed):
        raise ValueError("URL domain is not allowed")
    return value


def _check_year(value: int) -> int:
    max_year = datetime.now(timezone.utc).year + 1
    if not 1900 <= value <= max_year:
        raise ValueError(f"Year must be between 1900 and {max_year}")
    return value


Timestamp = Annotated[
    datetime,
    AfterValidator(_as_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]
Url = Annotated[str, AfterValidator(_check_url)]
StreamUrl = Annotated[str, AfterValidator(_check_stream_url)]
Year = Annotated[int, AfterValidator(_check_year)]


class StoredModel(BaseModel):
    """Entité sérialisable en document JSON (clés camelCase)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Représentation JSON telle qu'écrite sur disque (champs None omis)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_details(exc: PydanticValidationError) -> dict[str, list[str]]:
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        details.setdefault(field, []).append(error["msg"])
    return details


def parse_model(
    model_cls: type[ModelT],
    data: Any,
    allowed_domains: Optional[Iterable[str]] = None,
) -> ModelT:
    """
    Valide des données brutes contre une entité.

    Args:
        model_cls: Classe d'entité cible
        data: Dictionnaire ou instance à valider
        allowed_domains: Domaines de flux acceptés (défaut: DEFAULT_ALLOWED_VIDEO_DOMAINS)

    Returns:
        L'entité validée

    Raises:
        ValidationError: Avec le détail des champs rejetés
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_unset=True)
    context = {"allowed_domains": list(allowed_domains)} if allowed_domains is not None else None
    try:
        return model_cls.model_validate(data, context=context)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {model_cls.__name__}", details=_error_details(exc)
        ) from exc
