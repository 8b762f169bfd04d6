from __future__ import annotations

"""Scoreboard face: names, point chips, games/sets and the action buttons."""

from typing import Dict, Optional, Tuple
import pygame

from model.adapter import Scoreboard

from . import constants as C


BUTTONS = ("point_a", "point_b", "undo", "reset")


def layout(size: Tuple[int, int]) -> Dict[str, pygame.Rect]:
    """Compute the rectangles of every region for a window size.

    Pure geometry, so it can be used without a display.
    """
    w, h = size
    pad = C.PADDING_PX
    half = (w - 3 * pad) // 2
    rects: Dict[str, pygame.Rect] = {}

    y = pad
    name_h = int(h * C.NAME_BAND) - pad
    rects["name_a"] = pygame.Rect(pad, y, half, name_h)
    rects["name_b"] = pygame.Rect(2 * pad + half, y, half, name_h)

    y += name_h + pad
    point_h = int(h * C.POINT_BAND) - pad
    rects["chip_a"] = pygame.Rect(pad, y, half, point_h)
    rects["chip_b"] = pygame.Rect(2 * pad + half, y, half, point_h)

    y += point_h + pad
    metric_h = int(h * C.METRIC_BAND) - pad
    rects["games"] = pygame.Rect(pad, y, half, metric_h)
    rects["sets"] = pygame.Rect(2 * pad + half, y, half, metric_h)

    y += metric_h + pad
    button_h = (h - y - 2 * pad) // 2
    rects["point_a"] = pygame.Rect(pad, y, half, button_h)
    rects["point_b"] = pygame.Rect(2 * pad + half, y, half, button_h)
    y += button_h + pad
    rects["undo"] = pygame.Rect(pad, y, half, button_h)
    rects["reset"] = pygame.Rect(2 * pad + half, y, half, button_h)
    return rects


def hit_button(rects: Dict[str, pygame.Rect], pos: Tuple[int, int]) -> Optional[str]:
    """Return the name of the button under a point, if any."""
    for name in BUTTONS:
        if rects[name].collidepoint(pos):
            return name
    return None


class ScoreFace:
    def __init__(self, surf: pygame.Surface):
        # Fonts scale with the window height
        self.surf = surf
        self.resize(surf)

    def resize(self, surf: pygame.Surface):
        self.surf = surf
        h = surf.get_height()
        self.font_big = pygame.font.SysFont("arial", max(18, int(h * 0.16)), bold=True)
        self.font = pygame.font.SysFont("arial", max(12, int(h * 0.05)))
        self.font_small = pygame.font.SysFont("arial", max(10, int(h * 0.035)))
        self.rects = layout(surf.get_size())

    def _text(self, font, text: str, rect: pygame.Rect, color=C.TEXT_COLOR):
        img = font.render(text, True, color)
        self.surf.blit(img, img.get_rect(center=rect.center))

    def _box(self, rect: pygame.Rect, color):
        pygame.draw.rect(self.surf, color, rect, border_radius=max(4, rect.height // 6))

    def draw(self, board: Scoreboard, confirm_reset: bool = False):
        self.surf.fill(C.BG_COLOR)
        r = self.rects

        for key, name, serving, color in (
            ("name_a", board.name_a, board.server == "A", C.PLAYER_A_COLOR),
            ("name_b", board.name_b, board.server == "B", C.PLAYER_B_COLOR),
        ):
            rect = r[key]
            self._text(self.font, name, rect, color)
            if serving:
                radius = max(3, rect.height // 8)
                pygame.draw.circle(self.surf, C.SERVER_DOT_COLOR, (rect.left + radius + 2, rect.centery), radius)

        self._box(r["chip_a"], C.CHIP_SERVER_COLOR if board.server == "A" else C.CHIP_COLOR)
        self._box(r["chip_b"], C.CHIP_SERVER_COLOR if board.server == "B" else C.CHIP_COLOR)
        self._text(self.font_big, board.point_a, r["chip_a"])
        self._text(self.font_big, board.point_b, r["chip_b"])

        for key, title, (va, vb) in (("games", "Games", board.games), ("sets", "Sets", board.sets)):
            rect = r[key]
            top = pygame.Rect(rect.left, rect.top, rect.width, rect.height // 3)
            bottom = pygame.Rect(rect.left, top.bottom, rect.width, rect.height - top.height)
            if key == "sets" and board.match_over:
                title = "Match over"
            self._text(self.font_small, title, top, C.MUTED_TEXT_COLOR)
            self._text(self.font, f"{va} - {vb}", bottom)

        active = not board.match_over
        for key, label, color in (
            ("point_a", "+ A", C.BUTTON_COLOR if active else C.BUTTON_DISABLED_COLOR),
            ("point_b", "+ B", C.BUTTON_COLOR if active else C.BUTTON_DISABLED_COLOR),
            ("undo", "Undo", C.BUTTON_COLOR if board.can_undo else C.BUTTON_DISABLED_COLOR),
            ("reset", "Reset?" if confirm_reset else "Reset", C.RESET_COLOR),
        ):
            self._box(r[key], color)
            self._text(self.font, label, r[key])
