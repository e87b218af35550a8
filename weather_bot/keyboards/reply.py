from __future__ import annotations

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup

from ..locales import get_text


def location_keyboard(language: str) -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=get_text(language, "share_location_button"), request_location=True)]
        ],
        resize_keyboard=True,
    )
