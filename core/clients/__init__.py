from .payments import PaymentClient
from .gemini import GeminiClient
from .moderation import ModerationClient
from .video import VideoRoomClient
from .mailer import EmailClient

__all__ = ['PaymentClient', 'GeminiClient', 'ModerationClient', 'VideoRoomClient', 'EmailClient']
