# findkit

Tools for walking directory trees and for building command lines from
standard input.

The package has two parts:

- `findkit.find` walks directory trees and tests each entry against
  matchers: file type, size, inode number, hard link count, access,
  creation and modification times, "newer than" another file, regular
  expressions over the whole path, and a matcher that stops the search.
- `findkit.xargs` reads arguments from standard input or a file and runs a
  command with them, splitting the arguments over as many runs as the
  limits allow. It comes with the `findkit-xargs` command.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The `findkit-xargs` command

`findkit-xargs` reads arguments and runs a command with them. With no
command it prints the arguments, separated by spaces, one run per line.

```
$ printf 'abc\ndef g\\hi' | findkit-xargs
abc def ghi

$ printf 'ab cd ef\ngh i' | findkit-xargs -n2
ab cd
ef gh
i

$ printf 'ab cd\nef\ngh i\n\njkl\n' | findkit-xargs -L2
ab cd ef
gh i jkl

$ printf 'ab1cd1ef' | findkit-xargs -d1
ab cd ef
```

Input is split on whitespace by default. Single and double quotes group
words together and a backslash escapes the next character; a quote left
open at the end of input is an error. With `-d` or `-0` the input is split
on one byte instead, and empty pieces are skipped.

Options:

| Option | Meaning |
| --- | --- |
| `-a FILE`, `--arg-file FILE` | read arguments from FILE instead of standard input |
| `-d DELIM`, `--delimiter DELIM` | split input on a single byte; accepts `\n`, `\t`, `\\`, `\xHH`, `\0OOO` and the like |
| `-0`, `--null` | split input on NUL bytes |
| `-n N`, `--max-args N` | at most N arguments per run |
| `-L N` | at most N input lines per run |
| `-s N`, `--size N` | at most N characters per command line |
| `-x`, `--exit` | stop if the `-n` or `-L` limit cannot fit within the character limit |
| `-r`, `--no-run-if-empty` | do not run the command when there is no input |
| `-t`, `--verbose` | print each command to standard error before running it |
| `-P N`, `--max-procs N` | accepted, but commands still run one at a time |
| `-h`, `--help` | print help |
| `-V`, `--version` | print the version |

Short options can be combined (`-0n1`, `-xs11`). When both `-n` and `-L`
are given, the one that comes last wins and a warning is printed. When both
`-d` and `-0` are given, the last one wins. When arguments are read from
standard input, the command's own standard input is closed; with `-a` it
is inherited.

Exit status:

| Code | Meaning |
| --- | --- |
| 0 | every run succeeded |
| 123 | some run exited with a status from 1 to 254 |
| 124 | a run exited with status 255 |
| 125 | a run was killed by a signal |
| 126 | the command could not be run |
| 127 | the command was not found |
| 1 | any other error, such as bad options or an argument too large |

## Using the library

### xargs

`parse_delimiter` turns a delimiter as written on the command line into a
byte:

```python
from findkit.xargs.readers import parse_delimiter

parse_delimiter("\\n")     # 10
parse_delimiter("\\x61")   # 97
```

`findkit.xargs.readers` also has `WhitespaceDelimitedArgumentReader` and
`ByteDelimitedArgumentReader`, iterators of `Argument` objects over a binary
stream. `findkit.xargs.limiters` holds the size limiters (`MaxCharsLimiter`,
`MaxArgsLimiter`, `MaxLinesLimiter`) and the `LimiterCollection` that chains
them, and `findkit.xargs.command` has `build_options`, `CommandBuilder` and
`process_input` for driving runs from your own code.

### Walking and matching

`findkit.find.walk.walk` yields a `DirEntry` (with `path` and `depth`) for
every entry under a root, the root included. Read errors are yielded as
`OSError` objects so the walk carries on:

```python
from findkit.find.matchers.base import Config
from findkit.find.walk import walk

for item in walk("src", Config(max_depth=1, sorted_output=True)):
    if not isinstance(item, OSError):
        print(item.depth, item.path)
```

`Config` controls the walk: `min_depth`, `max_depth`, `depth_first`
(directories after their contents), `sorted_output` (entries sorted by
name) and `same_file_system`.

`findkit.find.walk.search` runs a `Matcher` over one or more paths and
returns a `SearchResult` with the number of matching entries:

```python
import sys

from findkit.find.matchers.base import ComparableValue, Config, Dependencies
from findkit.find.matchers.size import SizeMatcher
from findkit.find.walk import search

bigger_than_1k = SizeMatcher(ComparableValue(ComparableValue.Kind.MORE_THAN, 1), "k")
result = search(["."], Config(), Dependencies(sys.stdout), bigger_than_1k)
print(result.found_count)
```

The matchers are `TypeMatcher`, `SizeMatcher`, `InodeMatcher`,
`LinksMatcher`, `NewerMatcher`, `FileTimeMatcher`, `RegexMatcher` (emacs,
grep, posix-basic and posix-extended dialects) and `QuitMatcher`, each in
its own module under `findkit.find.matchers`.

## What is not included

There is no `find` command. The package has no parser for find-style
expressions, and no matchers that combine others (and, or, not), print
entries, match file names by glob, delete files or run commands for each
entry. Matchers only answer whether an entry matches; listing or acting on
the entries is left to the calling code.