"""Visual instances (sprites) spawned for grid cells during population."""

from __future__ import annotations
import pygame
from pygame.math import Vector3


class CellVisual(pygame.sprite.Sprite):
    """
    A sprite instanced from a template surface and anchored to a grid cell.
    Attributes:
        image (pygame.Surface): Private copy of the template surface.
        rect (pygame.Rect): Bounds of the image, centered on the in-plane anchor.
        cell (tuple): (x, y) grid coordinates the visual belongs to.
        world_pos (Vector3): World-space center of the cell.
    """

    def __init__(
        self, prefab: pygame.Surface, cell, world_pos: Vector3, anchor=None
    ) -> None:
        super().__init__()
        self.image = prefab.copy()
        self.rect = self.image.get_rect()
        self.cell = (int(cell[0]), int(cell[1]))
        self.world_pos = Vector3(world_pos)
        # In-plane position; defaults to the XY projection
        if anchor is None:
            anchor = (self.world_pos.x, self.world_pos.y)
        self.rect.center = (round(anchor[0]), round(anchor[1]))

    def __repr__(self):
        return f"<CellVisual cell={self.cell} pos={tuple(self.world_pos)}>"
