"""Extension URLs, code systems and status tables for FHIR transcoding.

Every private concern has exactly one extension URL. Consumers that do not
understand an extension ignore it, so produced resources stay readable by
generic FHIR tooling.
"""

# ── Namespaces ─────────────────────────────────────────────────────

BASE_URL = "https://form-fhir.dev/fhir"
STRUCTURE_DEFINITION = f"{BASE_URL}/StructureDefinition"

OPTION_CODE_SYSTEM = f"{BASE_URL}/CodeSystem/field-option"
CATEGORY_CODE_SYSTEM = f"{BASE_URL}/CodeSystem/form-category"
ORGANISATION_IDENTIFIER_SYSTEM = f"{BASE_URL}/NamingSystem/organisation"

# ── Field-level extensions ─────────────────────────────────────────

EXT_FIELD_TYPE = f"{STRUCTURE_DEFINITION}/field-type"
EXT_PLACEHOLDER = f"{STRUCTURE_DEFINITION}/field-placeholder"
EXT_ORDER = f"{STRUCTURE_DEFINITION}/field-order"
EXT_GROUP = f"{STRUCTURE_DEFINITION}/field-group"
EXT_META = f"{STRUCTURE_DEFINITION}/field-meta"
EXT_MULTIPLE = f"{STRUCTURE_DEFINITION}/field-multiple"

# ── Form-level extensions ──────────────────────────────────────────

EXT_VISIBILITY = f"{STRUCTURE_DEFINITION}/form-visibility"
EXT_SERVICE_ID = f"{STRUCTURE_DEFINITION}/form-service-id"
EXT_SPECIES_FILTER = f"{STRUCTURE_DEFINITION}/form-species-filter"
EXT_BUSINESS_TYPE = f"{STRUCTURE_DEFINITION}/form-business-type"
EXT_CREATED_BY = f"{STRUCTURE_DEFINITION}/form-created-by"
EXT_UPDATED_BY = f"{STRUCTURE_DEFINITION}/form-updated-by"
EXT_CREATED_AT = f"{STRUCTURE_DEFINITION}/form-created-at"

# ── Response-level extensions ──────────────────────────────────────

EXT_FORM_VERSION = f"{STRUCTURE_DEFINITION}/response-form-version"
EXT_APPOINTMENT_ID = f"{STRUCTURE_DEFINITION}/response-appointment-id"
EXT_COMPANION_ID = f"{STRUCTURE_DEFINITION}/response-companion-id"
EXT_PARENT_ID = f"{STRUCTURE_DEFINITION}/response-parent-id"
EXT_SUBMITTED_BY = f"{STRUCTURE_DEFINITION}/response-submitted-by"
EXT_SIGNING = f"{STRUCTURE_DEFINITION}/response-signing"

# ── Lifecycle status ───────────────────────────────────────────────
#
# Three internal values onto FHIR's four. "unknown" is accepted on read
# and collapses to draft; it is never written.

STATUS_TO_FHIR: dict[str, str] = {
    "draft": "draft",
    "published": "active",
    "archived": "retired",
}

STATUS_FROM_FHIR: dict[str, str] = {
    "draft": "draft",
    "active": "published",
    "retired": "archived",
    "unknown": "draft",
}

QUESTIONNAIRE_RESPONSE_STATUS = "completed"

DEFAULT_SIGNATURE_CONTENT_TYPE = "image/png"
