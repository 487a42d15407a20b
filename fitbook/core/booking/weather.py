"""
Weather code presentation (WMO codes as returned by Open-Meteo).
"""


def weather_icon(code: int, is_night: bool = False) -> str:
    if code == 0:
        return "🌙" if is_night else "☀️"
    if code == 1:
        return "🌙" if is_night else "🌤️"
    if code == 2:
        return "☁️" if is_night else "⛅"
    if code == 3:
        return "☁️"
    if code in (45, 48):
        return "🌫️"
    if 51 <= code <= 55:
        return "💧"
    if 61 <= code <= 67:
        return "🌧️"
    if 71 <= code <= 77:
        return "❄️"
    if 80 <= code <= 82:
        return "🌦️"
    if code >= 95:
        return "⛈️"
    return "🌙" if is_night else "🌤️"


def weather_description(code: int) -> str:
    if code == 0:
        return "בהיר"
    if 1 <= code <= 3:
        return "מעונן חלקית"
    if 61 <= code <= 67:
        return "גשום"
    if code >= 95:
        return "סוער"
    return "נאה"
