#!/usr/bin/env python3
"""
End-to-end cache behaviour across repeated invocations of the same script:
build once, reuse, then catch a same-second edit with hash-only mode.
"""
import os

import pytest

from scriptr import RunOptions, Scriptr
from scriptr._fingerprint import hash_bytes

CONTENT_X = b'fn main() { println!("X"); }\n'
CONTENT_Y = b'fn main() { println!("Y"); }\n'


@pytest.mark.regression_test
def test_build_reuse_and_same_mtime_edit(tmp_path, config, fake_cargo, launched):
    script = tmp_path / "a.rs"
    script.write_bytes(CONTENT_X)
    old_mtime_ns = script.stat().st_mtime_ns

    def invoke(**kwargs):
        # Fresh application object per run, as each invocation is its own process
        app = Scriptr(config)
        try:
            with pytest.raises(launched) as exc_info:
                app.run(RunOptions(script, **kwargs))
            return exc_info.value, app.cache.lookup(app.cache.key_for(script.resolve()))
        finally:
            app.logger.close()

    result, entry = invoke()
    assert len(fake_cargo.calls()) == 1
    assert entry.fingerprint.hash == hash_bytes(CONTENT_X)
    assert result.artifact == fake_cargo.artifact
    first_artifact = result.artifact

    result, entry = invoke()
    assert len(fake_cargo.calls()) == 1
    assert result.artifact == first_artifact

    script.write_bytes(CONTENT_Y)
    os.utime(script, ns=(old_mtime_ns, old_mtime_ns))

    result, entry = invoke(hash_only=True)
    assert len(fake_cargo.calls()) == 2
    assert entry.fingerprint.hash == hash_bytes(CONTENT_Y)


@pytest.mark.regression_test
def test_two_paths_same_content_build_separately(tmp_path, config, fake_cargo, launched):
    first = tmp_path / "one" / "a.rs"
    second = tmp_path / "two" / "a.rs"
    for script in (first, second):
        script.parent.mkdir()
        script.write_bytes(CONTENT_X)

    app = Scriptr(config)
    for script in (first, second, first, second):
        with pytest.raises(launched):
            app.run(RunOptions(script))
    app.logger.close()

    assert len(fake_cargo.calls()) == 2
    assert len(list(config.cache_dir.glob("*.json"))) == 2
