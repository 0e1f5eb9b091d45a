"""
Unit tests for synthesis result persistence.
"""

import csv
import json

import numpy as np
import pytest

from hinf_synthesis.control_design import ControllerDesigner, PlantModeler, SynthesisConfig
from hinf_synthesis.core.synthesis_logger import (
    LoggerConfig,
    NumpyEncoder,
    SynthesisLogger,
    load_results
)


@pytest.fixture
def designed():
    """First-order benchmark designed at gamma = 10."""
    plant = PlantModeler().get_benchmark('first_order')
    config = SynthesisConfig(gamma=10.0)
    result = ControllerDesigner().hinfsyn(plant, config=config)
    return plant, config, result


@pytest.fixture
def logger(tmp_path):
    return SynthesisLogger(LoggerConfig(output_dir=tmp_path / 'out'))


class TestNumpyEncoder:

    def test_numpy_types(self):
        data = {'a': np.arange(3), 'i': np.int64(4), 'f': np.float32(0.5), 'b': np.bool_(True)}
        decoded = json.loads(json.dumps(data, cls=NumpyEncoder))

        assert decoded == {'a': [0, 1, 2], 'i': 4, 'f': 0.5, 'b': True}

    def test_unknown_type_still_fails(self):
        with pytest.raises(TypeError):
            json.dumps({'x': object()}, cls=NumpyEncoder)


class TestSynthesisLogger:

    def test_save_creates_files(self, logger, designed):
        plant, config, result = designed
        logger.add_result(plant.name, plant, result)
        logger.set_config(config)

        saved = logger.save(suffix='unit')

        assert saved['json'].exists()
        assert saved['csv'].exists()
        assert saved['json'].name.endswith('_unit.json')

    def test_json_round_trip(self, logger, designed):
        plant, config, result = designed
        logger.add_result(plant.name, plant, result)
        logger.set_config(config)
        logger.add_metadata('operator', 'unit-test')

        data = load_results(logger.save()['json'])

        design = data['designs'][plant.name]
        np.testing.assert_array_equal(design['controller']['AK'], result.realization.AK)
        np.testing.assert_array_equal(design['plant']['D'], plant.D)
        assert design['gamma'] == 10.0
        assert design['workspace']['ldwork'] == result.workspace.ldwork
        assert data['metadata']['config']['gamma'] == 10.0
        assert data['metadata']['custom'] == {'operator': 'unit-test'}
        assert plant.name in data['metadata']['checksums']

    def test_checksum_changes_with_controller(self, logger, designed):
        plant, _, result = designed
        logger.add_result('a', plant, result)
        result.realization.AK = result.realization.AK + 1.0
        logger.add_result('b', plant, result)

        checksums = logger.build_data_structure()['metadata']['checksums']
        assert checksums['a'] != checksums['b']

    def test_csv_summary(self, logger, designed):
        plant, _, result = designed
        logger.add_result(plant.name, plant, result)

        with open(logger.save()['csv'], newline='') as f:
            rows = list(csv.reader(f))

        assert rows[0][:4] == ['name', 'n', 'ncon', 'nmeas']
        assert rows[1][:4] == [plant.name, '1', '1', '1']

    def test_non_finite_norm_stored_as_string(self, logger, designed):
        plant, _, result = designed
        result.closed_loop_norm = float('inf')
        logger.add_result(plant.name, plant, result)

        data = json.loads(json.dumps(logger.build_data_structure(), cls=NumpyEncoder))
        assert data['designs'][plant.name]['closed_loop_norm'] == 'inf'

    def test_json_only(self, tmp_path, designed):
        plant, _, result = designed
        logger = SynthesisLogger(LoggerConfig(output_dir=tmp_path, save_csv=False))
        logger.add_result(plant.name, plant, result)

        assert set(logger.save()) == {'json'}
