"""
Core fracture, placement and hit-testing functionality.
"""

from .fracture import Fragment, FractureConfig, generate_fragments, PIECE_COUNTS
from .voronoi_cells import compute_cells
from .relaxation import relax
from .placement import scatter, hit_test, find_topmost, check_snap, snap
from .fragment_store import FragmentStore, FragmentPlacedError, PuzzleSession
from .outlines import OutlineProvider, get_provider, list_species
from .prng import Mulberry32, make_prng

__all__ = ['Fragment', 'FractureConfig', 'generate_fragments', 'PIECE_COUNTS',
           'compute_cells', 'relax',
           'scatter', 'hit_test', 'find_topmost', 'check_snap', 'snap',
           'FragmentStore', 'FragmentPlacedError', 'PuzzleSession',
           'OutlineProvider', 'get_provider', 'list_species',
           'Mulberry32', 'make_prng']
