from report_reconcile.cli import parse_args


def test_parse_args_defaults():
    args = parse_args(["reconcile"])
    assert args.command == "reconcile"
    assert args.source == "all"
    assert args.overlay_config_dir is None
    assert args.strict is False


def test_parse_args_accepts_overlay_config_dir():
    args = parse_args(["all", "--overlay-config-dir", "config/live", "--source", "geo_ai"])
    assert args.overlay_config_dir == "config/live"
    assert args.source == "geo_ai"
