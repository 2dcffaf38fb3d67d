"""Client-facing message catalog (uz / en).

Error classes and route handlers refer to messages by key; `t()` resolves the
key in the requested language and falls back to English, then to the key.
"""

from __future__ import annotations

CATALOG: dict[str, dict[str, str]] = {
    "uz": {
        "api_running": "Test Platform API ishlamoqda",
        "validation": "Barcha maydonlar to'ldirilishi kerak",
        "login_required": "Login va parol kerak",
        "invalid_credentials": "Noto'g'ri login yoki parol",
        "telegram_required": "Telegram username kerak",
        "telegram_code_required": "Telegram username va kod kerak",
        "code_sent": "Kod Telegram orqali yuborildi",
        "code_created": "Kod yaratildi (Telegram bot ulanmagani uchun javobda qaytarildi)",
        "code_verified": "Kod tasdiqlandi",
        "invalid_or_expired": "Noto'g'ri kod yoki kod eskirgan",
        "registered": "Ro'yxatdan o'tish muvaffaqiyatli",
        "duplicate_login": "Bu login band",
        "duplicate_telegram": "Bu telegram username band",
        "unknown_direction": "Noto'g'ri yo'nalish",
        "missing_token": "Token kerak",
        "invalid_token": "Noto'g'ri token",
        "forbidden": "Admin huquqi kerak",
        "account_not_found": "Foydalanuvchi topilmadi",
        "test_not_found": "Test topilmadi",
        "test_payload_required": "Test ID va javoblar kerak",
        "already_submitted": "Bu testni allaqachon topshirgansiz",
        "unknown_test": "Noma'lum test",
        "unknown_user": "Noma'lum",
        "test_deleted": "Test o'chirildi",
        "direction_not_found": "Yo'nalish topilmadi",
        "direction_name_required": "Yo'nalish nomi kerak",
        "duplicate_direction": "Bu yo'nalish allaqachon mavjud",
        "direction_in_use_users": "Bu yo'nalish foydalanuvchilar tomonidan ishlatilmoqda",
        "direction_in_use_tests": "Bu yo'nalish testlar tomonidan ishlatilmoqda",
        "direction_deleted": "Yo'nalish o'chirildi",
        "storage": "Ma'lumotlarni saqlashda xatolik yuz berdi",
        "internal": "Serverda xatolik yuz berdi",
        "bot_start": "Salom! Test platformasiga xush kelibsiz. Tasdiqlash kodi uchun /register @username yuboring.",
        "bot_registered": "{username} sifatida ro'yxatdan o'tish uchun tasdiqlash kodi yuboriladi.",
        "bot_code": "Sizning tasdiqlash kodingiz: {code}",
        "cmd_start": "Botni ishga tushirish",
        "cmd_register": "Ro'yxatdan o'tish uchun username'ni ulash",
    },
    "en": {
        "api_running": "Test Platform API is running",
        "validation": "All fields are required",
        "login_required": "Login and password are required",
        "invalid_credentials": "Invalid login or password",
        "telegram_required": "Telegram username is required",
        "telegram_code_required": "Telegram username and code are required",
        "code_sent": "Code sent via Telegram",
        "code_created": "Code created (returned in the response because no Telegram chat is bound)",
        "code_verified": "Code verified",
        "invalid_or_expired": "Invalid or expired code",
        "registered": "Registration successful",
        "duplicate_login": "This login is taken",
        "duplicate_telegram": "This telegram username is taken",
        "unknown_direction": "Unknown direction",
        "missing_token": "Token required",
        "invalid_token": "Invalid token",
        "forbidden": "Admin privileges required",
        "account_not_found": "User not found",
        "test_not_found": "Test not found",
        "test_payload_required": "Test ID and answers are required",
        "already_submitted": "You have already submitted this test",
        "unknown_test": "Unknown test",
        "unknown_user": "Unknown",
        "test_deleted": "Test deleted",
        "direction_not_found": "Direction not found",
        "direction_name_required": "Direction name is required",
        "duplicate_direction": "This direction already exists",
        "direction_in_use_users": "This direction is used by accounts",
        "direction_in_use_tests": "This direction is used by tests",
        "direction_deleted": "Direction deleted",
        "storage": "Failed to store data",
        "internal": "Internal server error",
        "bot_start": "Hello! Welcome to the test platform. Send /register @username to receive verification codes.",
        "bot_registered": "Verification codes for {username} will be sent to this chat.",
        "bot_code": "Your verification code: {code}",
        "cmd_start": "Start the bot",
        "cmd_register": "Bind your username for registration",
    },
}


def t(key: str, lang: str = "uz", **fmt: object) -> str:
    """Resolve a message key in `lang`, formatting it with `fmt`."""
    text = CATALOG.get(lang, {}).get(key) or CATALOG["en"].get(key) or key
    return text.format(**fmt) if fmt else text
