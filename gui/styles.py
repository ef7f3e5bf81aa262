from string import Template


PALETTE = {
    "accent": "#2e7d32",
    "accent_dark": "#1b5e20",
    "accent_soft": "#c8e6c9",
    "page": "#f4f7f4",
    "panel": "#ffffff",
    "text": "#263238",
    "muted": "#78909c",
}

DROP_HOVER_STYLE = Template(
    "background-color: $accent_soft; border: 2px dashed $accent;"
).substitute(PALETTE)

_STYLE_TEMPLATE = Template("""
QMainWindow, QDialog { background: $page; color: $text; }
#MainTitle { font-size: 24px; font-weight: 700; color: $accent_dark; }
#SubTitle { font-size: 13px; color: $muted; }
#DropArea { background: $panel; border: 2px dashed $accent_soft; border-radius: 14px; }
#DropArea QLabel { font-size: 16px; color: $accent; }
#IssueReport, #QuestionList { background: $panel; border: 1px solid $accent_soft; border-radius: 6px; }
#IssueReport { font-family: 'Consolas', 'Malgun Gothic'; font-size: 12px; padding: 6px; }
QPushButton { padding: 8px 18px; border-radius: 6px; border: 1px solid $accent_soft; background: $panel; }
QPushButton:disabled { color: $muted; }
#PrimaryBtn { background: $accent; color: $panel; border: none; }
#PrimaryBtn:hover { background: $accent_dark; }
#PrimaryBtn:disabled { background: $accent_soft; }
""")

APP_STYLE = _STYLE_TEMPLATE.substitute(PALETTE)
