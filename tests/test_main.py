from main import build_parser, load_config


class TestCli:
    def test_flags_override_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        args = build_parser().parse_args([
            "--config", str(tmp_path / "missing.yaml"),
            "--port", "8123",
            "--data-dir", str(tmp_path),
            "--persist-across-restarts",
        ])
        config = load_config(args)
        assert config["server"]["port"] == 8123
        assert config["storage"]["data_dir"] == str(tmp_path)
        assert config["storage"]["persist_across_restarts"] is True

    def test_defaults_keep_fresh_start(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PERSIST_ACROSS_RESTARTS", raising=False)
        args = build_parser().parse_args(["--config", str(tmp_path / "none.yaml")])
        config = load_config(args)
        assert config["storage"]["persist_across_restarts"] is False
