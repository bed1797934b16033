"""
Project-wide constants for the Case Companion toolkit
"""

# ==============================================================================
# Completion Endpoint
# ==============================================================================

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"
DEFAULT_MODEL = "sonar-pro"
NETWORK_TIMEOUT = 60.0  # seconds

# ==============================================================================
# Prompt Assembly
# ==============================================================================

# Character budgets for decoded text document snippets
SNIPPET_BUDGET_ANALYSIS = 500
SNIPPET_BUDGET_CONVERSATION = 300
TRUNCATION_MARKER = "..."

# MIME markers whose payload is decoded and quoted into the prompt
TEXT_MIME_MARKERS = ("text/plain", "application/json", "text/html", "text/csv")
PDF_MIME_MARKER = "application/pdf"
IMAGE_MIME_MARKER = "image/"

# ==============================================================================
# Extraction
# ==============================================================================

NOT_SPECIFIED = "Not specified"
ROADMAP_FAILURE_NOTICE = "Could not generate the cost roadmap. Please try again."

# Upper bound on completion text handed to the parsers
MAX_TEXT_SIZE = 1_000_000
