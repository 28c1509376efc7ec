from asmgen.compiler import compile_config, codegen_brackets, _Shape
from asmgen.codegen import Byte, CapturedRegister, CapturedImmediate, Data, UpperLower
from asmgen.lexer import tokenize

def _ok(cfg: str):
    asm, diags = compile_config(cfg, filename="test.conf")
    assert asm is not None, [str(d) for d in diags]
    assert not any(d.is_error for d in diags)
    return asm, diags

def _errors(cfg: str):
    asm, diags = compile_config(cfg, filename="test.conf")
    assert asm is None
    return [d for d in diags if d.is_error], diags

def test_single_pattern_table():
    asm, diags = _ok("add r0, r1 -> 0x01 r0 r1")
    assert not diags
    ins = asm.get("ADD")
    assert ins.syntaxes == ("add r0, r1",)
    # start -> r -> , -> r
    assert len(ins.states) == 4
    last = ins.step(ins.step(ins.step(0, "register"), "comma"), "register")
    assert ins.accepting(last) == (Data(Byte(1)), Data(CapturedRegister(0)), Data(CapturedRegister(1)))
    assert ins.accepting(0) is None

def test_syntaxes_share_prefix_states():
    cfg = """
    mov r0, r1 -> 0x10 r0 r1
    mov r0, i0:8 -> 0x11 r0 i0
    mov r0 -> 0x12 r0
    """
    asm, _ = _ok(cfg)
    ins = asm.get("mov")
    # shared: start, r0, ','; then r1 and i0 branches
    assert len(ins.states) == 5
    after_comma = ins.step(ins.step(0, "register"), "comma")
    assert ins.step(after_comma, "register") is not None
    assert ins.step(after_comma, "immediate") is not None
    assert ins.accepting(ins.step(0, "register")) is not None
    assert ins.syntaxes == ("mov r0, r1", "mov r0, i0:8", "mov r0")

def test_mnemonics_are_case_insensitive_and_merge():
    asm, _ = _ok("NOP -> 0x00\nJmp i0:16 -> 0x20 i0")
    assert asm.mnemonics() == ["jmp", "nop"]
    assert asm.get("nop").accepting(0) == (Data(Byte(0)),)

def test_blank_and_comment_lines_skipped():
    asm, diags = _ok("\n   \n// a comment\nnop -> 0 // trailing\n")
    assert asm.mnemonics() == ["nop"] and not diags

def test_empty_template_is_accepting():
    asm, _ = _ok("hlt ->")
    assert asm.get("hlt").accepting(0) == ()

def test_positional_numbering_warns():
    asm, diags = _ok("mov r3, r1 -> 0x10 r0 r1")
    warns = [d for d in diags if d.severity == "warning"]
    assert len(warns) == 1
    assert "r3 will correspond to r0" in warns[0].message
    assert warns[0].origin.line == 0

def test_immediate_numbering_warns():
    _, diags = _ok("ldi i2:8 -> i0")
    assert any("i2 will correspond to i0" in d.message for d in diags)

def test_literal_truncation_warns():
    asm, diags = _ok("x -> 0x1FF")
    assert any("larger than 8 bits" in d.message for d in diags)
    assert asm.get("x").accepting(0) == (Data(Byte(0xFF)),)

def test_bracket_group_model():
    asm, _ = _ok("pack r0, i0:4 -> [r0 | i0] [0xA | 3]")
    ins = asm.get("pack")
    end = ins.step(ins.step(ins.step(0, "register"), "comma"), "immediate")
    assert ins.accepting(end) == (
        UpperLower(CapturedRegister(0), CapturedImmediate(0, 4)),
        UpperLower(Byte(0xA), Byte(3)),
    )

def test_bracket_literal_masked_with_warning():
    asm, diags = _ok("x -> [0x1F | 2]")
    assert any("larger than 4 bits" in d.message for d in diags)
    assert asm.get("x").accepting(0) == (UpperLower(Byte(0xF), Byte(2)),)

def test_missing_arrow():
    errs, _ = _errors("mov r0, r1 0x10")
    assert any("unexpected token" in e.message for e in errs)
    errs, _ = _errors("mov r0, r1")
    assert [e.message for e in errs] == ["expected '->' following an instruction pattern"]

def test_non_identifier_head():
    errs, _ = _errors("0x10 -> 1")
    assert "only instruction patterns are supported" in errs[0].message

def test_malformed_immediate_width():
    for cfg in ("ldi i0 -> 1", "ldi i0: -> 1", "ldi i0:r1 -> 1", "ldi i0:0 -> 1", "ldi i0:65 -> 1",
                "ldi i0:0x10000000000000000 -> 0x02 i0"):
        errs, _ = _errors(cfg)
        assert len(errs) == 1, cfg

def test_undeclared_references():
    errs, _ = _errors("mov r0 -> r1")
    assert "uses register 1" in errs[0].message
    errs, _ = _errors("mov r0 -> i0")
    assert "uses immediate 0" in errs[0].message

def test_unaligned_immediate_outside_brackets():
    errs, _ = _errors("x i0:4 -> i0")
    assert "byte aligned" in errs[0].message

def test_bracket_immediate_must_be_width_4():
    errs, _ = _errors("x i0:8 -> [i0 | 0]")
    assert "must be 4" in errs[0].message

def test_malformed_bracket_groups():
    for cfg in ("x r0 -> [r0 r0]", "x r0 -> [r0 | r0", "x -> [", "x -> [, | 1]"):
        errs, _ = _errors(cfg)
        assert len(errs) == 1, cfg

def test_unsupported_codegen_token():
    errs, _ = _errors("x r0 -> r0, 1")
    assert "codegen only supports" in errs[0].message

def test_conflicting_patterns_first_wins():
    asm, diags = compile_config("mov r0, r1 -> 0x10\nmov r5, r6 -> 0x20", filename="c")
    assert asm is None
    errs = [d for d in diags if d.is_error]
    assert len(errs) == 1
    assert "conflicting patterns for instruction 'mov'" in errs[0].message
    assert errs[0].origin.line == 1

def test_errors_do_not_stop_later_lines():
    _, diags = _errors("bad\n1 -> 2\nok -> 1 r9")
    lines = sorted({d.origin.line for d in diags if d.is_error})
    assert lines == [0, 1, 2]

def test_bracket_subparser_has_no_origin():
    toks = tokenize("r5 | 1]")
    group, diags = codegen_brackets(toks, "x", _Shape(0, 1, [], []))
    assert group == UpperLower(CapturedRegister(5), Byte(1))
    assert len(diags) == 1 and diags[0].origin is None

def test_compile_is_idempotent():
    cfg = "mov r0, r1 -> 0x10 r0 r1\nmov r0, i0:16 -> 0x11 r0 i0\npack r0, r1 -> [r0 | r1]"
    a, _ = compile_config(cfg)
    b, _ = compile_config(cfg)
    assert dict(a.instructions) == dict(b.instructions)
    src = "mov r1, r2\nmov r3, 0x1234\npack r5, r2"
    assert a.assemble(src)[0] == b.assemble(src)[0]

def test_widest_immediate_is_64_bits():
    asm, _ = _ok("ldq i0:64 -> i0")
    assert asm.assemble("ldq 0x1122334455667788")[0] == bytes.fromhex("8877665544332211")

def test_line_numbers_ignore_form_feeds():
    _, diags = _errors("nop -> 0 // \f\nbad\r\n")
    assert [d.origin.line for d in diags] == [1]
