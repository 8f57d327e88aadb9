import json

from config import Config, ConfigManager


def test_defaults_when_file_missing(tmp_path):
    manager = ConfigManager(tmp_path / 'config.json')
    config = manager.config
    assert config.api_base_url == 'http://localhost:8080'
    assert config.refresh_interval_seconds == 30
    assert config.theme == 'darkly'


def test_save_and_reload(tmp_path):
    path = tmp_path / 'data' / 'config.json'
    manager = ConfigManager(path)
    manager.update(api_base_url='http://tracker:9000', default_grouping='project')

    reloaded = ConfigManager(path).config
    assert reloaded.api_base_url == 'http://tracker:9000'
    assert reloaded.default_grouping == 'project'


def test_update_ignores_unknown_keys(tmp_path):
    manager = ConfigManager(tmp_path / 'config.json')
    manager.update(not_a_setting=1)
    assert not hasattr(manager.config, 'not_a_setting')


def test_unknown_keys_in_file_are_dropped(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'theme': 'flatly', 'polling_interval_seconds': 5}), encoding='utf-8')
    config = ConfigManager(path).config
    assert config.theme == 'flatly'
    assert config == Config(theme='flatly')


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{not json', encoding='utf-8')
    assert ConfigManager(path).config == Config()

    path.write_text('[1, 2]', encoding='utf-8')
    assert ConfigManager(path).config == Config()


def test_reset_to_defaults(tmp_path):
    path = tmp_path / 'config.json'
    manager = ConfigManager(path)
    manager.update(theme='litera')
    manager.reset_to_defaults()
    assert ConfigManager(path).config.theme == 'darkly'
