import dataclasses
import json
import os

import pytest

from pycfd.exceptions import CFDError, ConfigurationError
from pycfd.settings import CaseConfig, MeshParameters, SolverSettings


class TestDefaults:
    """Reference case: 65x65 nodes on a 5 cm cavity at Re = 100"""

    def test_mesh(self):
        mesh = MeshParameters()
        assert mesh.imax == 65 and mesh.jmax == 65
        assert mesh.dx == pytest.approx(0.05 / 64)
        assert mesh.dy == pytest.approx(0.05 / 64)
        assert mesh.center == (32, 32)
        assert mesh.x(64) == pytest.approx(0.05)

    def test_derived_viscosity(self):
        config = CaseConfig()
        assert config.rmu == pytest.approx(1.0 * 1.0 * 0.05 / 100.0)
        assert config.nu == pytest.approx(config.rmu)
        assert config.vel2ref == pytest.approx(1.0)

    def test_scheme_name(self):
        assert SolverSettings().scheme == 'JACOBI'
        assert SolverSettings(sgs_flag=1).scheme == 'SGS'

    def test_coordinates_layout(self):
        mesh = MeshParameters(imax=9, jmax=7)
        X, Y = mesh.coordinates()
        assert X.shape == (9, 7)
        assert X[8, 0] == pytest.approx(mesh.xmax)
        assert Y[0, 6] == pytest.approx(mesh.ymax)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            CaseConfig().mesh.imax = 33


class TestValidation:

    @pytest.mark.parametrize("flag", ['mms_flag', 'sgs_flag', 'restart_flag'])
    def test_mode_flags_must_be_binary(self, flag):
        with pytest.raises(ConfigurationError, match=flag):
            SolverSettings(**{flag: 2})

    @pytest.mark.parametrize("imax", [64, 3, 1])
    def test_grid_must_be_odd_and_large_enough(self, imax):
        with pytest.raises(ConfigurationError):
            MeshParameters(imax=imax)

    def test_negative_cfl(self):
        with pytest.raises(ConfigurationError):
            SolverSettings(cfl=-0.5)

    def test_reversed_extents(self):
        with pytest.raises(ConfigurationError):
            MeshParameters(xmin=1.0, xmax=0.0)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            SolverSettings(sgs_flag=3)
        assert issubclass(ConfigurationError, CFDError)

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigurationError):
            CaseConfig().with_overrides(solver={'mms_flag': -1})


class TestConfigSources:

    def test_from_dict(self):
        config = CaseConfig.from_dict({
            'mesh': {'imax': 33, 'jmax': 17},
            'fluid': {'Re': 400.0},
            'solver': {'sgs_flag': 1, 'toler': 1e-8},
            'output_dir': 'out',
        })
        assert config.mesh.imax == 33 and config.mesh.jmax == 17
        assert config.fluid.Re == 400.0
        assert config.solver.scheme == 'SGS'
        assert config.path('history.dat') == os.path.join('out', 'history.dat')

    def test_mms_constants_from_lists(self):
        config = CaseConfig.from_dict({'mms': {'phi0': [1.0, 0.0, 0.0]}})
        assert config.mms.phi0 == (1.0, 0.0, 0.0)

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError, match="Unknown"):
            CaseConfig.from_dict({'turbulence': {}})

    def test_unknown_field(self):
        with pytest.raises(ConfigurationError):
            CaseConfig.from_dict({'solver': {'omega': 1.2}})

    def test_from_json(self, tmp_path):
        filename = tmp_path / "case.json"
        filename.write_text(json.dumps({'mesh': {'imax': 21, 'jmax': 21}, 'solver': {'nmax': 10}}))
        config = CaseConfig.from_json(str(filename))
        assert config.mesh.imax == 21
        assert config.solver.nmax == 10

    def test_missing_json(self, tmp_path):
        with pytest.raises(ConfigurationError):
            CaseConfig.from_json(str(tmp_path / "missing.json"))
