"""Tests for the terminal prompt source."""

import asyncio

from chatfn.console import ConsoleIO


def test_system_prompt_from_file(tmp_path):
    prompt_file = tmp_path / "requirements.md"
    prompt_file.write_text("You review project requirements.", encoding="utf-8")
    io = ConsoleIO(system_prompt_file=str(prompt_file))
    assert asyncio.run(io.system_prompt()) == "You review project requirements."


def test_system_prompt_missing_file_falls_back_to_input(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "  You are helpful.  ")
    io = ConsoleIO(system_prompt_file=str(tmp_path / "missing.md"))
    assert asyncio.run(io.system_prompt()) == "You are helpful."
    assert "Enter a system prompt" in capsys.readouterr().out


def test_first_user_turn_prints_question(monkeypatch, capsys):
    answers = iter(["hello", "again"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    io = ConsoleIO()
    assert asyncio.run(io.next_user_turn()) == "hello"
    assert asyncio.run(io.next_user_turn()) == "again"
    assert capsys.readouterr().out.count("What is your first question?") == 1


def test_end_of_input_means_exit(monkeypatch):
    def eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    assert asyncio.run(ConsoleIO().next_user_turn()) == "exit"


def test_emit(capsys):
    ConsoleIO().emit("Sunny.")
    assert capsys.readouterr().out == "> Sunny.\n"
