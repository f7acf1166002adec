"""
Unit tests for batched field evaluation.
"""

import pytest
import torch
import numpy as np
from fieldlab.physics import ElectrostaticFieldEngine, FieldGrid, PointCharge
from fieldlab.physics.field_grid import default_device
from fieldlab.data.seed_points import uniform_grid


class TestFieldGrid:
    """Test suite for FieldGrid."""

    @pytest.fixture
    def grid(self):
        return FieldGrid()

    @pytest.fixture
    def charges(self):
        return [
            PointCharge('1', 35.0, 50.0, 5.0),
            PointCharge('2', 65.0, 50.0, -5.0),
            PointCharge('3', 20.0, 80.0, 1.5),
        ]

    @pytest.fixture
    def sample_coords(self):
        torch.manual_seed(42)
        return torch.rand(64, 2, dtype=torch.float64) * 100.0

    def test_field_shape(self, grid, charges, sample_coords):
        assert grid.field(sample_coords, charges).shape == (64, 2)
        assert grid.potential(sample_coords, charges).shape == (64,)
        assert grid.magnitude(sample_coords, charges).shape == (64,)

    def test_matches_scalar_engine(self, grid, charges, sample_coords):
        engine = ElectrostaticFieldEngine()
        E = grid.field(sample_coords, charges)
        V = grid.potential(sample_coords, charges)

        for i, (x, y) in enumerate(sample_coords.tolist()):
            sample = engine.sample_field((x, y), charges)
            assert E[i, 0].item() == pytest.approx(sample.ex, rel=1e-9, abs=1e-9)
            assert E[i, 1].item() == pytest.approx(sample.ey, rel=1e-9, abs=1e-9)
            assert V[i].item() == pytest.approx(sample.potential, rel=1e-9, abs=1e-9)

    def test_singularity_mask(self, grid, charges):
        """At a charge's own position only the other charges contribute."""
        coords = torch.tensor([[35.0, 50.0], [35.5, 50.0]], dtype=torch.float64)
        others = charges[1:]
        np.testing.assert_allclose(grid.field(coords, charges).numpy(),
                                   grid.field(coords, others).numpy())
        np.testing.assert_allclose(grid.potential(coords, charges).numpy(),
                                   grid.potential(coords, others).numpy())

    def test_lone_charge_at_own_position(self, grid):
        coords = torch.tensor([[10.0, 10.0]], dtype=torch.float64)
        E = grid.field(coords, [PointCharge('q', 10.0, 10.0, 3.0)])
        assert torch.equal(E, torch.zeros(1, 2, dtype=torch.float64))

    def test_empty_scene(self, grid, sample_coords):
        assert torch.count_nonzero(grid.field(sample_coords, [])) == 0
        assert torch.count_nonzero(grid.potential(sample_coords, [])) == 0

    def test_nan_coordinates_propagate(self, grid, charges):
        coords = torch.tensor([[float('nan'), 50.0]], dtype=torch.float64)
        assert torch.isnan(grid.field(coords, charges)).all()
        assert torch.isnan(grid.potential(coords, charges)).all()

    def test_potential_gradient_residual(self, grid, charges, sample_coords):
        """E = -∇V everywhere, including points inside a singularity radius."""
        coords = torch.cat([sample_coords, torch.tensor([[35.0, 50.0], [65.3, 50.0]],
                                                        dtype=torch.float64)])
        residual = grid.potential_gradient_residual(coords, charges)
        assert residual.shape == coords.shape
        assert torch.all(torch.isfinite(residual))
        assert torch.allclose(residual, torch.zeros_like(residual), atol=1e-8)

    def test_gradient_residual_empty_scene(self, grid, sample_coords):
        residual = grid.potential_gradient_residual(sample_coords, [])
        assert torch.count_nonzero(residual) == 0

    def test_float32_grid(self, charges, sample_coords):
        grid = FieldGrid(dtype=torch.float32)
        E = grid.field(sample_coords, charges)
        assert E.dtype == torch.float32

    def test_meshgrid_order(self, grid):
        X, Y, coords = grid.meshgrid((0.0, 100.0, 0.0, 50.0), (3, 2))
        assert X.shape == (2, 3)
        np.testing.assert_allclose(coords[:, 0].numpy(), X.ravel())
        np.testing.assert_allclose(coords[:, 1].numpy(), Y.ravel())

    def test_meshgrid_matches_uniform_grid(self, grid):
        bounds, resolution = (0.0, 100.0, 10.0, 40.0), (5, 4)
        X, Y, coords = grid.meshgrid(bounds, resolution)
        np.testing.assert_array_equal(coords.numpy(), uniform_grid(bounds, resolution))
        assert X[0, -1] == 100.0 and Y[-1, 0] == 40.0

    @pytest.mark.parametrize("preference", ["cpu", "cuda"])
    def test_default_device_keeps_explicit_choice(self, preference):
        assert default_device(preference) == preference

    def test_default_device_auto(self):
        expected = "cuda" if torch.cuda.is_available() else "cpu"
        assert default_device("auto") == expected
        assert default_device(None) == expected

    def test_evaluate(self, grid, charges):
        data = grid.evaluate((0.0, 100.0, 0.0, 100.0), (11, 21), charges)
        for key in ('X', 'Y', 'Ex', 'Ey', 'magnitude', 'potential'):
            assert data[key].shape == (21, 11)
        np.testing.assert_allclose(data['magnitude'], np.hypot(data['Ex'], data['Ey']))


if __name__ == "__main__":
    pytest.main([__file__])
