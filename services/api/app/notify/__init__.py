from app.notify.mailer import DeliveryError, send_general_notification, send_urgent_alert, verify_smtp_config

__all__ = ["send_urgent_alert", "send_general_notification", "verify_smtp_config", "DeliveryError"]
