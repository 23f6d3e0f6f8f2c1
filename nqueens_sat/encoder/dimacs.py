import io
from typing import List, TextIO, Tuple

from .nqueens_encoder import NQueensEncoder


def write_dimacs(encoder: NQueensEncoder, stream: TextIO) -> None:
    """Write the encoder's clauses to a stream in DIMACS CNF format."""
    stream.write(f"c {encoder.size} queens problem (variant)\n")
    stream.write(f"p cnf {encoder.num_variables} {len(encoder.clauses)}\n")
    for clause in encoder.clauses:
        stream.write(" ".join(str(lit) for lit in clause + [0]) + "\n")


def to_dimacs(encoder: NQueensEncoder) -> str:
    buffer = io.StringIO()
    write_dimacs(encoder, buffer)
    return buffer.getvalue()


def parse_dimacs(text: str) -> Tuple[int, List[List[int]]]:
    """Parse DIMACS CNF text.

    Args:
        text: CNF text with comment lines, one ``p cnf`` header and clauses
            terminated by ``0`` (a clause may span several lines)

    Returns:
        Tuple of the declared variable count and the list of clauses

    Raises:
        ValueError: If the header is missing or malformed, a literal is out of
            range, or the clause count does not match the header
    """
    num_variables = None
    num_clauses = 0
    clauses = []
    current = []

    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("c"):
            continue

        if line.startswith("p"):
            if num_variables is not None:
                raise ValueError(f"Duplicate problem line at line {line_no}")
            fields = line.split()
            if len(fields) != 4 or fields[1] != "cnf":
                raise ValueError(f"Malformed problem line at line {line_no}: {line}")
            try:
                num_variables, num_clauses = int(fields[2]), int(fields[3])
            except ValueError:
                raise ValueError(f"Malformed problem line at line {line_no}: {line}")
            continue

        if num_variables is None:
            raise ValueError(f"Clause before problem line at line {line_no}")

        for token in line.split():
            try:
                lit = int(token)
            except ValueError:
                raise ValueError(f"Invalid literal '{token}' at line {line_no}")
            if lit == 0:
                clauses.append(current)
                current = []
            elif abs(lit) > num_variables:
                raise ValueError(
                    f"Literal {lit} at line {line_no} exceeds {num_variables} variables"
                )
            else:
                current.append(lit)

    if num_variables is None:
        raise ValueError("Missing problem line")
    if current:
        raise ValueError("Last clause is not terminated by 0")
    if len(clauses) != num_clauses:
        raise ValueError(
            f"Expected {num_clauses} clauses but found {len(clauses)}"
        )

    return num_variables, clauses
