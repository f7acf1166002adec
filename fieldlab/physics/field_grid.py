"""
Batched field evaluation on tensors of query points.

Evaluates the same inverse-square law as the scalar engine over an (N, 2)
coordinate tensor, for field maps and vector plots, and checks E = -∇V
with automatic differentiation.
"""

import torch
import numpy as np
from typing import Optional, Sequence, Tuple

from .charges import Bounds, PointCharge
from .electrostatics import DEFAULT_COUPLING_CONSTANT, DEFAULT_SINGULARITY_RADIUS
from ..data.seed_points import uniform_grid


class FieldGrid:
    """
    Vectorised electrostatics for many query points at once.

    Charges within ``singularity_radius`` of a query point are masked out,
    matching ElectrostaticFieldEngine.sample_field point for point.
    """

    def __init__(self, coupling_constant: float = DEFAULT_COUPLING_CONSTANT,
                 singularity_radius: float = DEFAULT_SINGULARITY_RADIUS,
                 device: str = 'cpu', dtype: torch.dtype = torch.float64):
        """
        Initialise the grid evaluator.

        Args:
            coupling_constant: Scale factor k
            singularity_radius: Distance below which a charge is skipped
            device: Torch device for computations
            dtype: Floating point type of the results
        """
        self.coupling_constant = coupling_constant
        self.singularity_radius = singularity_radius
        self.device = device
        self.dtype = dtype

    def _charge_tensors(self, charges: Sequence[PointCharge]) -> Tuple[torch.Tensor, torch.Tensor]:
        positions = torch.tensor([[c.x, c.y] for c in charges], dtype=self.dtype,
                                 device=self.device).reshape(-1, 2)
        magnitudes = torch.tensor([c.magnitude for c in charges], dtype=self.dtype,
                                  device=self.device)
        return positions, magnitudes

    def _displacements(self, coords: torch.Tensor, charges: Sequence[PointCharge]):
        """
        Per-pair displacement, distance and skip mask.

        Returns:
            (delta [N, M, 2], r [N, M], keep [N, M], magnitudes [M])
        """
        positions, magnitudes = self._charge_tensors(charges)
        coords = coords.to(device=self.device, dtype=self.dtype)
        delta = coords.unsqueeze(1) - positions.unsqueeze(0)
        r_sq = torch.sum(delta**2, dim=-1)
        r_plain = torch.sqrt(r_sq.detach())
        # Written as a skip test so NaN distances stay in and propagate
        keep = ~((r_plain < self.singularity_radius) | (r_plain == 0))
        # sqrt is taken on unit placeholders for skipped pairs so autograd never sees sqrt(0)
        r = torch.sqrt(torch.where(keep, r_sq, torch.ones_like(r_sq)))
        return delta, r, keep, magnitudes

    def field(self, coords: torch.Tensor, charges: Sequence[PointCharge]) -> torch.Tensor:
        """
        Electric field at each query point.

        Args:
            coords: Query points of shape (N, 2)
            charges: Charges of the scene

        Returns:
            Field tensor of shape (N, 2)
        """
        if len(charges) == 0:
            return torch.zeros(coords.shape[0], 2, dtype=self.dtype, device=self.device)

        delta, r, keep, q = self._displacements(coords, charges)
        strength = self.coupling_constant * q.unsqueeze(0) / r**3
        strength = torch.where(keep, strength, torch.zeros_like(strength))
        return torch.sum(strength.unsqueeze(-1) * delta, dim=1)

    def potential(self, coords: torch.Tensor, charges: Sequence[PointCharge]) -> torch.Tensor:
        """Electrostatic potential at each query point, shape (N,)."""
        if len(charges) == 0:
            return torch.zeros(coords.shape[0], dtype=self.dtype, device=self.device)

        _, r, keep, q = self._displacements(coords, charges)
        contributions = self.coupling_constant * q.unsqueeze(0) / r
        contributions = torch.where(keep, contributions, torch.zeros_like(contributions))
        return torch.sum(contributions, dim=1)

    def magnitude(self, coords: torch.Tensor, charges: Sequence[PointCharge]) -> torch.Tensor:
        """Field magnitude |E| at each query point, shape (N,)."""
        return torch.norm(self.field(coords, charges), dim=-1)

    def potential_gradient_residual(self, coords: torch.Tensor,
                                    charges: Sequence[PointCharge]) -> torch.Tensor:
        """
        Residual E + ∇V computed with autograd.

        Vanishes (to rounding) wherever no charge is inside the singularity
        radius, since E = -∇V for the point-charge potential.

        Args:
            coords: Query points of shape (N, 2)
            charges: Charges of the scene

        Returns:
            Residual tensor of shape (N, 2)
        """
        coords = coords.detach().to(device=self.device, dtype=self.dtype).clone()
        coords.requires_grad_(True)

        potential = self.potential(coords, charges)
        if not potential.requires_grad:
            # No charges: V is constant zero and so is its gradient
            return self.field(coords.detach(), charges)

        grad_V = torch.autograd.grad(
            outputs=potential,
            inputs=coords,
            grad_outputs=torch.ones_like(potential),
            allow_unused=True
        )[0]
        if grad_V is None:
            grad_V = torch.zeros_like(coords)

        return self.field(coords.detach(), charges) + grad_V

    def meshgrid(self, bounds: Bounds, resolution: Tuple[int, int]
                 ) -> Tuple[np.ndarray, np.ndarray, torch.Tensor]:
        """
        Regular grid over ``bounds`` for field maps.

        Returns:
            (X, Y, coords) where X and Y have shape (ny, nx) and coords is the
            flattened (nx * ny, 2) tensor in the same order
        """
        nx, ny = resolution
        points = uniform_grid(bounds, resolution)
        X = points[:, 0].reshape(ny, nx)
        Y = points[:, 1].reshape(ny, nx)
        coords = torch.tensor(points, dtype=self.dtype, device=self.device)
        return X, Y, coords

    def evaluate(self, bounds: Bounds, resolution: Tuple[int, int],
                 charges: Sequence[PointCharge]) -> dict:
        """
        Field components, magnitude and potential on a regular grid.

        Returns:
            Dictionary of numpy arrays shaped (ny, nx): 'X', 'Y', 'Ex', 'Ey',
            'magnitude', 'potential'
        """
        X, Y, coords = self.meshgrid(bounds, resolution)
        E = self.field(coords, charges)
        V = self.potential(coords, charges)
        shape = X.shape
        return {
            'X': X,
            'Y': Y,
            'Ex': E[:, 0].cpu().numpy().reshape(shape),
            'Ey': E[:, 1].cpu().numpy().reshape(shape),
            'magnitude': torch.norm(E, dim=-1).cpu().numpy().reshape(shape),
            'potential': V.cpu().numpy().reshape(shape),
        }


def default_device(preference: Optional[str] = 'auto') -> str:
    """Resolve 'auto' to cuda when available, otherwise cpu."""
    if preference in (None, 'auto'):
        return 'cuda' if torch.cuda.is_available() else 'cpu'
    return preference
