"""Service layer: ingestion, validation, search, AI client, workspace, export."""

from .ai_service import AIService, AIServiceError, AINotConfiguredError
from .export import ExportBlockedError, build_rules_config, build_workbook, rules_config_json
from .ingestion import IngestionError, UnsupportedFileError, ingest_file, load_sample_data, parse_upload
from .normalization import coerce_field_value, normalize_records
from .search import local_search, substring_search
from .validation import summarize, validate_data
from .workspace import EditError, EntityNotFoundError, RuleNotFoundError, Workspace

__all__ = [
    "AIService",
    "AIServiceError",
    "AINotConfiguredError",
    "ExportBlockedError",
    "build_rules_config",
    "build_workbook",
    "rules_config_json",
    "IngestionError",
    "UnsupportedFileError",
    "ingest_file",
    "load_sample_data",
    "parse_upload",
    "coerce_field_value",
    "normalize_records",
    "local_search",
    "substring_search",
    "summarize",
    "validate_data",
    "EditError",
    "EntityNotFoundError",
    "RuleNotFoundError",
    "Workspace",
]
