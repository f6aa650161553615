import argparse
import json
import logging
import sys

from pydantic import ValidationError

from domain.converters import transform_workouts
from domain.models import SourceWorkout


def _load_workouts(data):
    items = data if isinstance(data, list) else [data]
    return [SourceWorkout.model_validate(item) for item in items]


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Convert source workout JSON to destination workout JSON"
    )
    parser.add_argument("input", help="Input JSON file path (one workout or a list)")
    parser.add_argument("-o", "--output", help="Output JSON file path (default: stdout)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    try:
        # Load input JSON
        with open(args.input, "r") as f:
            workouts = _load_workouts(json.load(f))

        batch = transform_workouts(workouts)

        for message in batch.messages:
            print(f"{message.severity}: {message.field}: {message.message}", file=sys.stderr)

        output = json.dumps(
            [workout.model_dump(mode="json") for workout in batch.workouts],
            indent=2,
            ensure_ascii=False,
        )

        # Output result
        if args.output:
            with open(args.output, "w") as f:
                f.write(output)
        else:
            print(output)

    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Invalid workout: {e}", file=sys.stderr)
        sys.exit(1)

    if not batch.workouts:
        print("Error: No workouts were transformed", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
