# exceptions.py
class BOMError(Exception):
    """Base exception for radar and satellite imagery errors"""
    pass

class SourceUnavailable(BOMError):
    """Raised when the FTP source cannot be connected to or logged in to"""
    pass

class TransferError(BOMError):
    """Raised when a listing or download fails part way"""
    pass

class StorageError(BOMError):
    """Raised when an object store read, write, list or delete fails"""
    pass

class ImageDecodeError(BOMError):
    """Raised when image bytes cannot be decoded"""
    pass

class ImageEncodeError(BOMError):
    """Raised when an image cannot be encoded"""
    pass

class ConfigurationError(BOMError):
    """Raised at startup when required configuration is missing"""
    pass

class NoFramesError(BOMError):
    """Raised when the source has no frames for a subject"""
    pass

class ForecastError(BOMError):
    """Raised when the forecast API request fails"""
    pass
