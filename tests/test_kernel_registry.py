import logging

import pytest

from pytpfem.errors import ConfigurationError, UnsupportedSpecializationError
from pytpfem.jit.kernels import grad_sum_factorized, grad_sum_factorized_serial
from pytpfem.jit.registry import DEFAULT_SPECIALIZATIONS, KernelRegistry


class TestKernelRegistry:
    def test_defaults_include_q2_with_four_points(self):
        assert (3, 4) in DEFAULT_SPECIALIZATIONS
        registry = KernelRegistry(allow_generic=False)
        assert (3, 4) in registry
        assert registry.is_supported(3, 4)
        assert registry.supported() == tuple(sorted(DEFAULT_SPECIALIZATIONS))

    def test_kernel_compiled_once_per_pair(self):
        registry = KernelRegistry(allow_generic=False, parallel=False)
        k1 = registry.get(3, 4)
        k2 = registry.get(3, 4)
        assert k1 is k2
        assert registry.get(2, 3) is not k1

    def test_register_new_pair(self):
        registry = KernelRegistry(specializations=(), allow_generic=False, parallel=False)
        assert not registry.is_supported(6, 8)
        registry.register(6, 8)
        assert registry.is_supported(6, 8)
        assert registry.supported() == ((6, 8),)

    def test_register_rejects_nonpositive(self):
        with pytest.raises(ValueError):
            KernelRegistry(specializations=((0, 2),))


class TestKernelRegistryErrors:
    def test_unsupported_pair_raises_configuration_error(self):
        registry = KernelRegistry(allow_generic=False)
        with pytest.raises(UnsupportedSpecializationError) as excinfo:
            registry.get(9, 2)
        err = excinfo.value
        assert isinstance(err, ConfigurationError) and isinstance(err, ValueError)
        assert (err.d1d, err.q1d) == (9, 2)
        assert (3, 4) in err.available
        assert "D1D=9" in str(err)

    def test_generic_fallback(self, caplog):
        registry = KernelRegistry(specializations=(), allow_generic=True, parallel=True)
        with caplog.at_level(logging.WARNING, logger="pytpfem.jit.registry"):
            kernel = registry.get(9, 2)
        assert kernel is grad_sum_factorized
        assert "runtime-sized" in caplog.text
        serial = KernelRegistry(specializations=(), allow_generic=True, parallel=False)
        assert serial.get(9, 2) is grad_sum_factorized_serial


class TestRegistryConfiguration:
    def test_environment_defaults(self, monkeypatch):
        monkeypatch.setenv("PYTPFEM_GENERIC_KERNEL", "yes")
        monkeypatch.setenv("PYTPFEM_SERIAL", "1")
        registry = KernelRegistry()
        assert registry.allow_generic is True
        assert registry.parallel is False

    def test_explicit_arguments_override_environment(self, monkeypatch):
        monkeypatch.setenv("PYTPFEM_GENERIC_KERNEL", "true")
        registry = KernelRegistry(allow_generic=False, parallel=True)
        assert registry.allow_generic is False
        assert registry.parallel is True

    def test_unset_environment(self, monkeypatch):
        monkeypatch.delenv("PYTPFEM_GENERIC_KERNEL", raising=False)
        monkeypatch.delenv("PYTPFEM_SERIAL", raising=False)
        registry = KernelRegistry()
        assert registry.allow_generic is False
        assert registry.parallel is True
