from .auth import User, SessionToken
from .quotes import Quote, QuoteWindow, QuoteVersion, DOCUMENT_STATUSES, WINDOW_TYPES, WINDOW_SPEC_FIELDS
from .materials import MaterialQuote, MaterialLine, MaterialQuoteVersion, MATERIAL_UNITS, RECIPIENT_FIELDS

__all__ = [
    'User', 'SessionToken',
    'Quote', 'QuoteWindow', 'QuoteVersion',
    'MaterialQuote', 'MaterialLine', 'MaterialQuoteVersion',
    'DOCUMENT_STATUSES', 'WINDOW_TYPES', 'WINDOW_SPEC_FIELDS',
    'MATERIAL_UNITS', 'RECIPIENT_FIELDS',
]
