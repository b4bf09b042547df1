"""External integrations."""
from .qr_encoder import QRCodeEncoder

__all__ = ["QRCodeEncoder"]
