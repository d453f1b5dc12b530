from services.protocol.schema_validation import ProtocolValidationError, ProtocolValidator

__all__ = ["ProtocolValidationError", "ProtocolValidator"]
