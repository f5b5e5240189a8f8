from .telegram import AlertConfig, TelegramAlerts, send_test_alert

__all__ = ["AlertConfig", "TelegramAlerts", "send_test_alert"]
