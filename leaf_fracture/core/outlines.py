"""
Leaf outline providers.

Each species is one OutlineProvider producing an outline polygon and a set of
vein polylines in a local frame roughly centred on (0, 0) with an extent of
about +-200 units. The fracture engine only ever sees the outline polygon.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, List

import numpy as np


def _polar(r: float, angle: float) -> List[float]:
    return [r * math.cos(angle), r * math.sin(angle)]


def _wrap_angle(diff: float) -> float:
    """Wrap an angle difference into [-pi, pi]."""
    while diff > math.pi:
        diff -= 2 * math.pi
    while diff < -math.pi:
        diff += 2 * math.pi
    return diff


def _ellipse_radius(angle: float, rx: float, ry: float) -> float:
    return math.sqrt(1 / ((math.cos(angle) / rx) ** 2 + (math.sin(angle) / ry) ** 2))


def pinnate_veins(tip_y: float, base_y: float, mid_x: float, n_secondary: int,
                  spread: float, leaf_width: float) -> List[np.ndarray]:
    """Midrib from stem to tip with mirrored secondary veins branching off it."""
    steps = 20
    midrib = np.array([[mid_x, base_y + (tip_y - base_y) * i / steps] for i in range(steps + 1)])
    veins = [midrib]

    for i in range(1, n_secondary + 1):
        t = 0.15 + (i / (n_secondary + 1)) * 0.7
        start_y = base_y + (tip_y - base_y) * t
        vein_len = leaf_width * spread * (0.5 + 0.5 * math.sin(t * math.pi))

        left = np.array([
            [mid_x - vein_len * s, start_y + (tip_y - base_y) * 0.08 * s * (1 - s * 0.5)]
            for s in (j / 8 for j in range(9))
        ])
        right = left.copy()
        right[:, 0] = 2 * mid_x - left[:, 0]
        veins.extend([left, right])

    return veins


class OutlineProvider(ABC):
    """A leaf species that can draw its own outline and veins."""

    species_id: str = ""
    name: str = ""
    scientific_name: str = ""
    difficulty: int = 1
    fun_fact: str = ""

    @abstractmethod
    def generate_outline(self) -> np.ndarray:
        """Return the leaf outline as an (n, 2) polygon."""

    @abstractmethod
    def generate_veins(self) -> List[np.ndarray]:
        """Return the vein polylines."""


class MapleOutline(OutlineProvider):
    species_id = "maple"
    name = "Sugar Maple"
    scientific_name = "Acer saccharum"
    difficulty = 1
    fun_fact = ("Sugar Maple sap is boiled down to make maple syrup. It takes about "
                "40 litres of sap to produce just 1 litre of syrup!")

    # (angle, tip radius, angular width) of the five lobes
    LOBES = (
        (-math.pi / 2, 180, 0.35),
        (-math.pi / 2 + 0.75, 150, 0.3),
        (-math.pi / 2 + 1.6, 120, 0.28),
        (-math.pi / 2 - 0.75, 150, 0.3),
        (-math.pi / 2 - 1.6, 120, 0.28),
    )
    SINUS_RADIUS = 60
    N_POINTS = 120

    def generate_outline(self) -> np.ndarray:
        points = []
        for i in range(self.N_POINTS):
            angle = (i / self.N_POINTS) * 2 * math.pi - math.pi / 2
            r = self.SINUS_RADIUS
            for lobe_angle, lobe_r, width in self.LOBES:
                diff = _wrap_angle(angle - lobe_angle)
                r += (lobe_r - self.SINUS_RADIUS) * math.exp(-(diff * diff) / (2 * width * width))
            r += math.sin(angle * 25) * 3  # serration
            points.append(_polar(r, angle))

        # Stem at the bottom
        stem_base = [0.0, 90.0]
        stem_end = [0.0, 120.0]
        bottom = round(self.N_POINTS / 2)
        points[bottom:bottom] = [stem_base, stem_end, stem_base]
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        veins = [np.array([[0.0, 100.0], [0.0, -170.0]])]
        for tip_x, tip_y in ((110, -80), (90, 60), (-110, -80), (-90, 60)):
            mid_y = -20 if tip_y < 0 else 20
            veins.append(np.array([
                [0.0, mid_y],
                [tip_x * 0.5, mid_y + (tip_y - mid_y) * 0.4],
                [tip_x, tip_y],
            ], dtype=np.float64))
        return veins


class OakOutline(OutlineProvider):
    species_id = "oak"
    name = "English Oak"
    scientific_name = "Quercus robur"
    difficulty = 2
    fun_fact = ("An English Oak can live for over 1,000 years and support more than "
                "2,300 different species of wildlife.")

    def generate_outline(self) -> np.ndarray:
        n_points = 100
        points = []
        for i in range(n_points):
            angle = (i / n_points) * 2 * math.pi - math.pi / 2
            lobe = math.cos(angle * 5) * 25  # rounded lobes
            base_narrow = 1 - 0.3 * max(0.0, math.cos(angle + math.pi / 2))
            r = _ellipse_radius(angle, 90 * base_narrow, 140)
            points.append([(r + lobe) * math.cos(angle), (r + lobe * 0.7) * math.sin(angle)])
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        return pinnate_veins(-130, 100, 0, 6, 0.5, 180)


class ChestnutOutline(OutlineProvider):
    species_id = "chestnut"
    name = "Horse Chestnut"
    scientific_name = "Aesculus hippocastanum"
    difficulty = 2
    fun_fact = ("The seeds of Horse Chestnut trees are called conkers. The British game "
                "of Conkers has been played since at least the 1850s!")

    N_LOBES = 7
    LOBE_SPACING = 0.45

    def _lobe_angle(self, lobe: int) -> float:
        return -math.pi / 2 + (lobe - (self.N_LOBES - 1) / 2) * self.LOBE_SPACING

    def generate_outline(self) -> np.ndarray:
        n_points = 120
        centre_lobe = self.N_LOBES // 2
        points = []
        for i in range(n_points):
            angle = (i / n_points) * 2 * math.pi - math.pi / 2
            r = 100.0
            for lobe in range(self.N_LOBES):
                diff = _wrap_angle(angle - self._lobe_angle(lobe))
                lobe_r = 75 * (1 if lobe == centre_lobe else 0.85)
                r += lobe_r * math.exp(-(diff * diff) / (2 * 0.12 * 0.12))
            r += math.sin(angle * 22) * 4
            r *= 1 - max(0.0, math.sin(angle + math.pi / 2)) * 0.4  # narrow base
            points.append(_polar(r, angle))
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        veins = [np.array([[0.0, 80.0], [0.0, -170.0]])]
        centre_lobe = self.N_LOBES // 2
        for lobe in range(self.N_LOBES):
            tip = _polar(160 if lobe == centre_lobe else 140, self._lobe_angle(lobe))
            veins.append(np.array([
                [0.0, 60.0],
                [tip[0] * 0.4, 60 + (tip[1] - 60) * 0.4],
                tip,
            ]))
        return veins


class BirchOutline(OutlineProvider):
    species_id = "birch"
    name = "Silver Birch"
    scientific_name = "Betula pendula"
    difficulty = 3
    fun_fact = ("Silver Birch bark contains a chemical called betulin that makes it "
                "waterproof. Viking longships used birch bark for caulking!")

    def generate_outline(self) -> np.ndarray:
        n_points = 80
        points = []
        for i in range(n_points):
            angle = (i / n_points) * 2 * math.pi - math.pi / 2
            rx = 80 + math.sin(angle) * 20  # wider towards the base
            rx *= 1 - max(0.0, -math.sin(angle)) * 0.5  # pointed tip
            r = _ellipse_radius(angle, rx, 160)
            serration = math.sin(angle * 18) * 5 + math.sin(angle * 36) * 2
            points.append([(r + serration) * math.cos(angle), r * math.sin(angle)])
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        return pinnate_veins(-150, 100, 0, 7, 0.45, 160)


class BeechOutline(OutlineProvider):
    species_id = "beech"
    name = "Common Beech"
    scientific_name = "Fagus sylvatica"
    difficulty = 4
    fun_fact = ("Beech trees produce so much shade that almost nothing grows beneath "
                "them. The forest floor under a beech canopy is often called a "
                "\"beech desert.\"")

    def generate_outline(self) -> np.ndarray:
        n_points = 80
        points = []
        for i in range(n_points):
            angle = (i / n_points) * 2 * math.pi - math.pi / 2
            r = _ellipse_radius(angle, 95, 150)
            wave = math.sin(angle * 12) * 5
            points.append([(r + wave) * math.cos(angle), r * math.sin(angle)])
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        return pinnate_veins(-140, 110, 0, 8, 0.5, 190)


class LimeOutline(OutlineProvider):
    species_id = "lime"
    name = "Common Lime"
    scientific_name = "Tilia x europaea"
    difficulty = 5
    fun_fact = ("Lime tree flowers make a delicious calming tea. In France, \"tilleul\" "
                "(lime blossom tea) is one of the most popular herbal drinks.")

    def generate_outline(self) -> np.ndarray:
        n_points = 100
        points = []
        for i in range(n_points):
            angle = (i / n_points) * 2 * math.pi
            heart_r = 120 * (1 - 0.7 * math.sin(angle))
            x = heart_r * math.cos(angle) * 0.85
            y = heart_r * math.sin(angle) * 1.1 - 30

            # Cleft at the leaf base
            if math.pi * 0.35 < angle < math.pi * 0.65:
                cleft_t = (angle - math.pi * 0.35) / (math.pi * 0.3)
                y += math.sin(cleft_t * math.pi) * 25

            serration = math.sin(angle * 20) * 3
            points.append([x + serration * math.cos(angle), y + serration * math.sin(angle)])
        return np.array(points)

    def generate_veins(self) -> List[np.ndarray]:
        veins = [np.array([[0.0, 90.0], [0.0, -120.0]])]
        for tip in ((-70, -40), (-85, 10), (70, -40), (85, 10)):
            veins.append(np.array([[0.0, 80.0], tip], dtype=np.float64))
        for i in range(1, 4):
            t = 0.3 + i * 0.18
            y = 90 - 210 * t
            reach = 60 * (1 - t * 0.5)
            veins.append(np.array([[0.0, y], [-reach, y - 15]]))
            veins.append(np.array([[0.0, y], [reach, y - 15]]))
        return veins


PROVIDERS: Dict[str, OutlineProvider] = {
    provider.species_id: provider
    for provider in (
        MapleOutline(),
        OakOutline(),
        ChestnutOutline(),
        BirchOutline(),
        BeechOutline(),
        LimeOutline(),
    )
}


def get_provider(species_id: str) -> OutlineProvider:
    """Look up a species, raising KeyError for unknown ids."""
    if species_id not in PROVIDERS:
        raise KeyError(f"Unknown species '{species_id}'. Available: {list(PROVIDERS)}")
    return PROVIDERS[species_id]


def list_species() -> List[OutlineProvider]:
    """All species in registry order."""
    return list(PROVIDERS.values())
