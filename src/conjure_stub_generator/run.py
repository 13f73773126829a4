"""Top-level module for plan generation."""

from __future__ import annotations

import argparse
import glob
import json
import logging
import os.path
from dataclasses import dataclass

from conjure_stub_generator.conjure_types import ServiceDefinition
from conjure_stub_generator.errors import ConjureDefinitionError, ServicePlanningError
from conjure_stub_generator.ir_loader import IR_SUFFIX, load_services
from conjure_stub_generator.planner import build_service_plan
from conjure_stub_generator.planner_dto import ServicePlan

logger = logging.getLogger(__name__)

PLAN_SUFFIX = ".plan.json"


class PlanGenerationError(Exception):
    """Raised when one or more definition files or services could not be planned."""

    pass


@dataclass
class PlannedService:
    """A service plan together with the definition file it came from."""

    source_path: str
    plan: ServicePlan


def write_plan(plan: ServicePlan, output_file_path: str) -> None:
    """Write a service plan as JSON.

    Args:
        plan (ServicePlan): The plan to write.
        output_file_path (str): The name of the output file, without file extension.
    """
    with open(output_file_path + PLAN_SUFFIX, "w", encoding="utf8") as output_file:
        json.dump(plan.to_dict(), output_file, indent=2)
        output_file.write("\n")

    logger.info("Wrote plan to '%s%s'.", output_file_path, PLAN_SUFFIX)


def plan_services(services: list[ServiceDefinition], source_path: str) -> tuple[list[PlannedService], list[str]]:
    """Plan every service of a definition file.

    Args:
        services (list[ServiceDefinition]): The services loaded from `source_path`.
        source_path (str): The definition file, for reporting.

    Returns:
        tuple[list[PlannedService], list[str]]: The successful plans and a message per failure.
    """
    planned: list[PlannedService] = []
    failures: list[str] = []

    for service in services:
        try:
            planned.append(PlannedService(source_path, build_service_plan(service)))
        except ServicePlanningError as e:
            for error in e.errors:
                logger.error("%s: %s: %s", source_path, service.name, error)
                failures.append(f"{source_path}: {service.name}: {error}")

    return planned, failures


def find_definition_files(paths: list[str], excludes: list[str], root_directory: str, recursive: bool) -> list[str]:
    """Resolve paths, directories and glob expressions into conjure IR files.

    Args:
        paths (list[str]): Paths, directories or glob expressions to search.
        excludes (list[str]): Paths or glob expressions to leave out.
        root_directory (str): The directory relative paths are resolved against.
        recursive (bool): Whether directories and `**` globs are searched recursively.

    Returns:
        list[str]: The matching files, sorted.
    """
    excluded_paths: set[str] = set()
    for exclude in excludes:
        exclude_path = os.path.join(root_directory, exclude)
        if os.path.isfile(exclude_path):
            excluded_paths.add(exclude_path)
        else:
            excluded_paths = excluded_paths.union(glob.glob(exclude_path, recursive=recursive))

    search_paths: set[str] = set()
    for path in paths:
        search_path = os.path.join(root_directory, path)

        if recursive and os.path.isdir(search_path):
            for root, _, files in os.walk(search_path):
                for file in files:
                    if file.endswith(IR_SUFFIX):
                        search_paths.add(os.path.join(root, file))
        elif os.path.isdir(search_path):
            for file in os.listdir(search_path):
                file_path = os.path.join(search_path, file)
                if os.path.isfile(file_path) and file.endswith(IR_SUFFIX):
                    search_paths.add(file_path)
        else:
            search_paths = search_paths.union(p for p in glob.glob(search_path, recursive=recursive) if os.path.isfile(p))

    return sorted(search_paths - excluded_paths)


def _output_directory(source_path: str, output_dir: str, common_base: str | None) -> str:
    if not output_dir:
        return os.path.dirname(source_path)

    if common_base:
        rel_dir = os.path.dirname(os.path.relpath(os.path.abspath(source_path), common_base))
        return os.path.join(output_dir, rel_dir)
    return output_dir


def assign_output_paths(
    planned: list[PlannedService], output_dir: str, common_base: str | None
) -> tuple[dict[str, PlannedService], list[str]]:
    """Decide the plan file of every planned service.

    Plan files are named after the service, so two services of the same name that end up
    in the same output directory would overwrite each other. The first one keeps the file,
    every later one is reported as a failure and not written.

    Args:
        planned (list[PlannedService]): The planned services, in discovery order.
        output_dir (str): The output directory, or an empty string to write next to the definitions.
        common_base (str | None): The common directory of all definition files.

    Returns:
        tuple[dict[str, PlannedService], list[str]]: The services by output path (without file
            extension) and a message per colliding service.
    """
    outputs: dict[str, PlannedService] = {}
    claimed: dict[str, PlannedService] = {}
    collisions: list[str] = []

    for planned_service in planned:
        output_directory = _output_directory(planned_service.source_path, output_dir, common_base)
        output_file_path = os.path.join(output_directory, planned_service.plan.service.name)
        key = os.path.normpath(os.path.abspath(output_file_path))

        previous = claimed.get(key)
        if previous is not None:
            message = (
                f"{planned_service.source_path}: {planned_service.plan.service.name}: plan file "
                f"'{output_file_path}{PLAN_SUFFIX}' is already written for the service from {previous.source_path}"
            )
            logger.error("%s", message)
            collisions.append(message)
            continue

        claimed[key] = planned_service
        outputs[output_file_path] = planned_service

    return outputs, collisions


def run(args: argparse.Namespace, root_directory: str):
    """Run the planner on a set of paths that point to conjure IR files.

    Plans are only written when every service could be planned, unless `--keep-going`
    is given, in which case the successful plans are written regardless.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the plan generator.
        root_directory (str): The directory, from which the generator is executed.

    Raises:
        PlanGenerationError: If any definition file or service failed.
    """
    clean: list[str] = args.clean
    output_dir: str = getattr(args, "output_dir", "")
    keep_going: bool = getattr(args, "keep_going", False)

    cleanup_paths: set[str] = set()
    for c in clean:
        cleanup_directory = os.path.join(root_directory, c)
        cleanup_paths = cleanup_paths.union(glob.glob(cleanup_directory, recursive=args.recursive))

    for cleanup_path in cleanup_paths:
        os.remove(cleanup_path)

    valid_paths = find_definition_files(args.paths, args.excludes, root_directory, args.recursive)
    if not valid_paths:
        logger.warning("No conjure IR files found for %s", args.paths)

    planned: list[PlannedService] = []
    failures: list[str] = []

    for path in valid_paths:
        try:
            services = load_services(path)
        except ConjureDefinitionError as e:
            logger.error("%s", e)
            failures.append(str(e))
            continue

        path_planned, path_failures = plan_services(services, path)
        planned.extend(path_planned)
        failures.extend(path_failures)

    common_base = os.path.commonpath([os.path.abspath(os.path.dirname(p)) for p in valid_paths]) if valid_paths else None
    outputs, collisions = assign_output_paths(planned, output_dir, common_base)
    failures.extend(collisions)

    if failures and not keep_going:
        raise PlanGenerationError(f"{len(failures)} failure(s), no plans were written:\n" + "\n".join(failures))

    for output_file_path, planned_service in outputs.items():
        os.makedirs(os.path.dirname(output_file_path) or ".", exist_ok=True)
        write_plan(planned_service.plan, output_file_path)

    if failures:
        raise PlanGenerationError(f"{len(failures)} failure(s):\n" + "\n".join(failures))
