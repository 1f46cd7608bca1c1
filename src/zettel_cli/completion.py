"""Shell completion script generation."""

from typing import Iterable

COMMANDS = (
    "new",
    "edit",
    "open",
    "list",
    "search",
    "link",
    "index",
    "tags",
    "reindex",
    "completion",
)

GLOBAL_OPTIONS = ("--help", "--version", "--log-level", "-h", "-V")


def bash_completion_script(
    prog: str = "zettel",
    commands: Iterable[str] = COMMANDS,
    options: Iterable[str] = GLOBAL_OPTIONS,
) -> str:
    """Return a bash script completing subcommands and global options.

    Note IDs are completed from the files in ``$ZETTEL_HOME`` (or
    ``~/zettelkasten``) for the argument of ``edit`` and for both the
    SOURCE and TARGET of ``link``. The subcommand is located by position,
    skipping global options, so ``--log-level LEVEL`` may precede it.
    """
    func = f"_{prog.replace('-', '_')}_completion"
    words = " ".join(list(commands) + list(options))
    return f"""# Bash completion for {prog}
# Load with: eval "$({prog} completion)"
{func}() {{
    local cur prev dir cmd="" cmd_index=0 i
    COMPREPLY=()
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    prev="${{COMP_WORDS[COMP_CWORD-1]}}"
    dir="${{ZETTEL_HOME:-$HOME/zettelkasten}}"

    if [[ "$prev" == "--log-level" ]]; then
        COMPREPLY=( $(compgen -W "DEBUG INFO WARNING ERROR CRITICAL" -- "${{cur}}") )
        return 0
    fi

    for (( i=1; i < COMP_CWORD; i++ )); do
        case "${{COMP_WORDS[i]}}" in
            --log-level) (( i++ )) ;;
            -*) ;;
            *) cmd="${{COMP_WORDS[i]}}"; cmd_index=$i; break ;;
        esac
    done

    local arg=$(( COMP_CWORD - cmd_index ))
    if [[ "$cmd" == "edit" && $arg -eq 1 ]] || [[ "$cmd" == "link" && $arg -le 2 ]]; then
        local ids
        ids=$(cd "$dir" 2>/dev/null && ls *.md 2>/dev/null | sed 's/\\.md$//')
        COMPREPLY=( $(compgen -W "${{ids}}" -- "${{cur}}") )
        return 0
    fi

    if [[ -z "$cmd" || "$cur" == -* ]]; then
        COMPREPLY=( $(compgen -W "{words}" -- "${{cur}}") )
    fi
}}
complete -F {func} {prog}
"""
