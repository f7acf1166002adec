import sys
import torch
import numpy as np
from fieldlab.physics import ElectrostaticFieldEngine, FieldGrid, PointCharge, TraceConfig
from fieldlab.data import ChargeScene


def validate_superposition():
    """Field of A ∪ B equals field of A plus field of B."""
    print("Validating superposition...")

    engine = ElectrostaticFieldEngine()
    charges_a = [PointCharge('a1', 20.0, 30.0, 3.0), PointCharge('a2', 70.0, 80.0, -1.5)]
    charges_b = [PointCharge('b1', 55.0, 40.0, -4.0)]

    rng = np.random.default_rng(0)
    worst = 0.0
    for x, y in rng.uniform(0.0, 100.0, size=(200, 2)):
        whole = engine.sample_field((x, y), charges_a + charges_b)
        part_a = engine.sample_field((x, y), charges_a)
        part_b = engine.sample_field((x, y), charges_b)
        worst = max(worst,
                    abs(whole.ex - part_a.ex - part_b.ex),
                    abs(whole.ey - part_a.ey - part_b.ey),
                    abs(whole.potential - part_a.potential - part_b.potential))

    print(f"Maximum superposition residual: {worst:.2e}")

    if worst < 1e-9:
        print("✓ Superposition validation passed")
        return True
    else:
        print("✗ Superposition validation failed")
        return False


def validate_dipole_symmetry():
    """Potential is zero midway between +q and -q."""
    print("\nValidating dipole symmetry...")

    scene = ChargeScene.default()
    sample = ElectrostaticFieldEngine().sample_field((50.0, 50.0), scene.charges)
    print(f"Midpoint: Ex = {sample.ex:.4f}, Ey = {sample.ey:.4f}, V = {sample.potential:.4f}")

    if abs(sample.potential) < 1e-9 and abs(sample.ey) < 1e-9 and sample.ex > 0:
        print("✓ Dipole symmetry validation passed")
        return True
    else:
        print("✗ Dipole symmetry validation failed")
        return False


def validate_sign_convention():
    """Positive charges push the field outward, negative charges pull it in."""
    print("\nValidating sign convention...")

    engine = ElectrostaticFieldEngine()
    outward = engine.sample_field((10.0, 0.0), [PointCharge('p', 0.0, 0.0, 5.0)])
    inward = engine.sample_field((10.0, 0.0), [PointCharge('n', 0.0, 0.0, -5.0)])
    print(f"Positive: Ex = {outward.ex:.3f}; negative: Ex = {inward.ex:.3f}")

    if outward.ex > 0 and inward.ex < 0 and outward.ey == 0 and inward.ey == 0:
        print("✓ Sign convention validation passed")
        return True
    else:
        print("✗ Sign convention validation failed")
        return False


def validate_field_lines():
    """Dipole lines start at their charge and end off-screen or on a charge."""
    print("\nValidating field-line tracing...")

    scene = ChargeScene.default()
    config = TraceConfig()
    lines = ElectrostaticFieldEngine().trace_field_lines(scene.charges, config)

    per_charge = {}
    for line in lines:
        per_charge[line.origin_charge] = per_charge.get(line.origin_charge, 0) + 1
    too_long = [line for line in lines if len(line) > config.max_steps + 1]

    print(f"Lines per charge: {per_charge}")
    print(f"Stop reasons: {sorted({line.stop_reason.value for line in lines})}")

    if per_charge == {'1': 10, '2': 10} and not too_long:
        print("✓ Field-line validation passed")
        return True
    else:
        print("✗ Field-line validation failed")
        return False


def validate_gradient_consistency():
    """E = -∇V on a grid, checked with autograd."""
    print("\nValidating E = -∇V...")

    grid = FieldGrid()
    _, _, coords = grid.meshgrid((0.0, 100.0, 0.0, 100.0), (21, 21))
    residual = grid.potential_gradient_residual(coords, ChargeScene.default().charges)
    worst = float(torch.max(torch.abs(residual)))
    print(f"Maximum |E + ∇V|: {worst:.2e}")

    if worst < 1e-8:
        print("✓ Gradient consistency validation passed")
        return True
    else:
        print("✗ Gradient consistency validation failed")
        return False


def main():
    """Run all physics validations."""
    print("Electrostatic Field Lab Physics Validation")
    print("=" * 50)

    print(f"PyTorch version: {torch.__version__}")
    print(f"Device: {'CUDA' if torch.cuda.is_available() else 'CPU'}")
    print()

    validations = [
        validate_superposition,
        validate_dipole_symmetry,
        validate_sign_convention,
        validate_field_lines,
        validate_gradient_consistency
    ]

    results = []
    for validation in validations:
        try:
            result = validation()
            results.append(result)
        except (RuntimeError, ValueError, ArithmeticError) as e:
            print(f"✗ Validation failed with error: {e}")
            results.append(False)

    print("\n" + "=" * 50)
    print("VALIDATION SUMMARY")
    print("=" * 50)

    passed = sum(results)
    total = len(results)

    print(f"Tests passed: {passed}/{total}")

    if passed == total:
        print("✓ All physics validations passed successfully!")
        return 0
    else:
        print("✗ Some validations failed. Review implementation before proceeding.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
