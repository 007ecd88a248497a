"""CLI for form-fhir transcoding."""

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from form_fhir import __version__
from form_fhir.config import load_global_config
from form_fhir.fhir import FormCodec, ResourceTypeError, ResourceValidationError, SubmissionCodec
from form_fhir.io import read_json, read_records, write_records
from form_fhir.models import Form, FormField, FormSubmission, to_fhir_json
from form_fhir.validation import validate_resource

app = typer.Typer(
    name="form-fhir",
    help="Transcode dynamic forms and submissions to and from FHIR Questionnaires.",
    no_args_is_help=True,
)
console = Console()

InputOption = Annotated[Path, typer.Option("--in", "-i", help="Input JSON or JSONL file path")]
OutputOption = Annotated[Path, typer.Option("--out", "-o", help="Output JSON or JSONL file path")]
SchemaOption = Annotated[
    Path | None,
    typer.Option("--schema", "-s", help="Form or Questionnaire JSON providing the field tree"),
]
ValidateOption = Annotated[
    bool | None,
    typer.Option("--validate/--no-validate", help="Validate FHIR resources against the bundled schemas"),
]

RecordConverter = Callable[[dict[str, Any]], dict[str, Any]]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"form-fhir version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """form-fhir: FHIR transcoding for dynamic forms."""
    pass


def _load_schema(path: Path | None) -> list[FormField] | None:
    """Load a field tree from a Form JSON or a Questionnaire JSON file."""
    if path is None:
        return None
    if not path.exists():
        console.print(f"[red]Error:[/red] Schema file not found: {path}")
        raise typer.Exit(1)

    try:
        data = read_json(path)
        if isinstance(data, dict) and data.get("resourceType") == "Questionnaire":
            return FormCodec().from_resource(data).schema_
        return Form.model_validate(data).schema_
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid schema file {path}: {e}")
        raise typer.Exit(1)


def _read_input(path: Path) -> list[Any]:
    try:
        return read_records(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _transcode(
    input_path: Path,
    output_path: Path,
    convert: RecordConverter,
    label: str,
) -> None:
    """Convert every record of the input file and write the results."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(1)

    config = load_global_config()
    records = _read_input(input_path)

    console.print(f"[bold]form-fhir[/bold] v{__version__}")
    console.print(f"  Input: {input_path}")
    console.print(f"  Output: {output_path}")

    results: list[dict[str, Any]] = []
    failed_count = 0

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"{label}...", total=None)

        for index, record in enumerate(records, 1):
            try:
                if not isinstance(record, dict):
                    raise ValueError(f"expected a JSON object, got {type(record).__name__}")
                results.append(convert(record))
            except (ResourceTypeError, ResourceValidationError, ValueError) as e:
                console.print(f"\n[yellow]Warning:[/yellow] Record {index} failed: {e}")
                failed_count += 1
            progress.update(task, description=f"{label}: {index} records...")

    written = write_records(output_path, results, indent=config.indent)

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Records read: {len(records)}")
    console.print(f"  [green]Written:[/green] {written}")
    if failed_count:
        console.print(f"  [red]Failed:[/red] {failed_count}")
        raise typer.Exit(1)


def _should_validate(flag: bool | None) -> bool:
    if flag is not None:
        return flag
    return load_global_config().validate_output


@app.command("encode-form")
def encode_form(
    input_path: InputOption,
    output_path: OutputOption,
    validate: ValidateOption = None,
) -> None:
    """Convert Form definitions to FHIR Questionnaires."""
    codec = FormCodec()
    check = _should_validate(validate)

    def convert(record: dict[str, Any]) -> dict[str, Any]:
        resource = to_fhir_json(codec.to_resource(Form.model_validate(record)))
        if check:
            validate_resource(resource)
        return resource

    _transcode(input_path, output_path, convert, "Encoding forms")


@app.command("decode-form")
def decode_form(
    input_path: InputOption,
    output_path: OutputOption,
    validate: ValidateOption = None,
) -> None:
    """Convert FHIR Questionnaires to Form definitions."""
    codec = FormCodec()
    check = _should_validate(validate)

    def convert(record: dict[str, Any]) -> dict[str, Any]:
        if check:
            validate_resource(record)
        return codec.from_resource(record).model_dump(mode="json", by_alias=True)

    _transcode(input_path, output_path, convert, "Decoding questionnaires")


@app.command("encode-submission")
def encode_submission(
    input_path: InputOption,
    output_path: OutputOption,
    schema_path: SchemaOption = None,
    validate: ValidateOption = None,
) -> None:
    """Convert form submissions to FHIR QuestionnaireResponses."""
    codec = SubmissionCodec()
    schema = _load_schema(schema_path)
    check = _should_validate(validate)

    def convert(record: dict[str, Any]) -> dict[str, Any]:
        submission = FormSubmission.model_validate(record)
        resource = to_fhir_json(codec.to_resource(submission, schema))
        if check:
            validate_resource(resource)
        return resource

    _transcode(input_path, output_path, convert, "Encoding submissions")


@app.command("decode-submission")
def decode_submission(
    input_path: InputOption,
    output_path: OutputOption,
    schema_path: SchemaOption = None,
    validate: ValidateOption = None,
) -> None:
    """Convert FHIR QuestionnaireResponses to form submissions."""
    codec = SubmissionCodec()
    schema = _load_schema(schema_path)
    check = _should_validate(validate)

    def convert(record: dict[str, Any]) -> dict[str, Any]:
        if check:
            validate_resource(record)
        return codec.from_resource(record, schema).model_dump(mode="json", by_alias=True)

    _transcode(input_path, output_path, convert, "Decoding responses")


@app.command()
def validate(
    resource_path: Annotated[
        Path,
        typer.Argument(help="JSON or JSONL file of Questionnaire / QuestionnaireResponse resources"),
    ],
) -> None:
    """Validate FHIR resources against the bundled schemas."""
    if not resource_path.exists():
        console.print(f"[red]Error:[/red] File not found: {resource_path}")
        raise typer.Exit(1)

    invalid_count = 0
    for index, record in enumerate(_read_input(resource_path), 1):
        try:
            validate_resource(record)
        except (ResourceTypeError, ResourceValidationError) as e:
            console.print(f"[red]Invalid:[/red] record {index}: {e}")
            invalid_count += 1

    if invalid_count:
        raise typer.Exit(1)
    console.print(f"[green]Valid:[/green] {resource_path}")


if __name__ == "__main__":
    app()
