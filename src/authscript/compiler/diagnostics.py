"""
Diagnostics — Human-readable parse failure messages.
"""

# Token the parser uses to denote the end of the input
EOF_TOKEN = "EOF"

END_OF_SCRIPT = "the end of the script"


def describe_expected_input(expected: list[str]) -> str:
    """
    Describe the inputs a parser expected at a failure point.

    `expected` is the alphabetized list reported by the parser. If the
    end-of-input token is present it is moved to the end of the list,
    reworded as "the end of the script".

    >>> describe_expected_input(["EOF", "a", "b"])
    'Encountered unexpected input while parsing script. Expected a, b, or the end of the script.'
    """
    items = [value for value in expected if value != EOF_TOKEN]
    if len(items) != len(expected):
        items.append(END_OF_SCRIPT)

    if len(items) >= 3:
        described = ", ".join(items[:-1]) + f", or {items[-1]}"
    elif len(items) == 2:
        described = " or ".join(items)
    elif items:
        described = items[0]
    else:
        described = "nothing"

    return f"Encountered unexpected input while parsing script. Expected {described}."
