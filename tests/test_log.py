import logging

from validator_tools.log import REDACTED, ContextAdapter, get_logger, redact


def test_context_prefix(caplog):
    log = get_logger("validator_tools.test", keystore=2).bind(worker=5)

    with caplog.at_level(logging.INFO, logger="validator_tools.test"):
        log.info("signed")

    assert caplog.records[-1].getMessage() == "[keystore=2 worker=5] signed"


def test_bind_does_not_modify_parent(caplog):
    parent = get_logger("validator_tools.test", keystore=1)
    parent.bind(worker=0)

    with caplog.at_level(logging.INFO, logger="validator_tools.test"):
        parent.info("done")

    assert caplog.records[-1].getMessage() == "[keystore=1] done"


def test_plain_logger_without_context(caplog):
    log = get_logger("validator_tools.test")
    assert isinstance(log, ContextAdapter)

    with caplog.at_level(logging.INFO, logger="validator_tools.test"):
        log.info("hello")

    assert caplog.records[-1].getMessage() == "hello"


def test_redact():
    args = ["--validator=/k.json", "--passphrase=hunter2", "--json"]
    assert redact(args, ["hunter2", ""]) == ["--validator=/k.json", f"--passphrase={REDACTED}", "--json"]
