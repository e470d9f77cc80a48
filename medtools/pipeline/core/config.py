# =============================================================================
# LLM Request Settings
# =============================================================================

LLM_GENERATION_TIMEOUT_SECONDS = 300  # chat/completions calls
LLM_METADATA_TIMEOUT_SECONDS = 30  # /models and other metadata calls
LLM_MAX_REDIRECTS = 3
HARD_DEFAULT_TEXT_MODEL = "qwen2.5:1.5b"  # used when a requested model is unknown


# =============================================================================
# External Fetch Settings
# =============================================================================

WEB_FETCH_TIMEOUT_SECONDS = 30
WEB_FETCH_MAX_REDIRECTS = 5
WEB_CONTENT_MAX_CHARS = 10000  # page text sent to the model

PUBMED_ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
PUBMED_EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"
PUBMED_TIMEOUT_SECONDS = 30
PUBMED_MAX_REDIRECTS = 3
PUBMED_MAX_RESULTS = 5
PUBMED_MAX_AUTHORS = 5
PUBMED_USER_AGENT = "MedicalLiteratureSearch/1.0"


# =============================================================================
# Validation Limits
# =============================================================================

REPORT_MAX_CHARS = 10000  # rra, dpa, rdd, pec, sde, exp
QUERY_MAX_CHARS = 500  # sml
PAPER_MAX_CHARS = 50000  # stp
TRANSCRIPT_MAX_CHARS = 1_000_000  # soap

MB = 1024 * 1024
IMAGE_UPLOAD_MAX_BYTES = 10 * MB  # ocr, sde
TRANSCRIPT_UPLOAD_MAX_BYTES = 2 * MB  # soap
PAPER_UPLOAD_MAX_BYTES = 1 * MB  # stp


# =============================================================================
# Response Handling
# =============================================================================

ERROR_BODY_MAX_CHARS = 200  # excerpt kept from malformed or failed responses


# =============================================================================
# OCR Preprocessing
# =============================================================================

OCR_MAX_DIMENSION = 1000  # bounding box edge in pixels
OCR_HISTOGRAM_LEVELS = 256


# =============================================================================
# Preferences
# =============================================================================

COOKIE_MAX_AGE_SECONDS = 30 * 24 * 60 * 60  # 30 days
COOKIE_PATH = "/"
CHAT_HISTORY_LENGTH = 10  # exchanges kept, each is a user and an assistant message
