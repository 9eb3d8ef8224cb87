#!/usr/bin/env python3
"""
Workout Randomizer
Command line entry point for generating, rerolling and regenerating workouts.
"""

import argparse
import sys

from workout_randomizer.circuit import alternate_by_muscle_group, group_by_round
from workout_randomizer.config import load_config
from workout_randomizer.exercise_catalog import load_exercise_library
from workout_randomizer.exercise_pool import build_pool_from_plans, pool_summary
from workout_randomizer.plan_editor import PlanEditor
from workout_randomizer.plan_store import PlanStore
from workout_randomizer.quota_templates import QuotaTemplateStore
from workout_randomizer.random_selector import generate_plan_name, generate_workout


def parse_quota(value):
    """Parse TAG=COUNT (e.g. "Chest=3") into a quota dict."""
    tag, sep, count = value.rpartition("=")
    if not sep or not tag.strip():
        raise argparse.ArgumentTypeError(f"Quota must look like TAG=COUNT, got {value!r}")
    try:
        parsed = int(count)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Quota count must be a whole number, got {count!r}")
    return {"tag": tag.strip(), "count": parsed}


def print_section(title):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def format_exercise(index, exercise, pinned=False):
    marker = "📌" if pinned else "  "
    line = f"{marker} {index:>2}. {exercise['name']} [{exercise.get('tag') or '-'}]"
    line += f" {exercise.get('sets')} x {exercise.get('reps')}"
    if exercise.get("weight"):
        line += f" @ {exercise['weight']}"
    if exercise.get("rest"):
        line += f" | rest {exercise['rest']}"
    return line


def print_plan(plan):
    pin_status = plan.get("pin_status") or {}
    print(f"\n{plan['name']}  (id: {plan['id']})")
    exercises = plan.get("exercises") or []
    if not exercises:
        print("  (no exercises)")
        return

    positions = {ex["id"]: idx for idx, ex in enumerate(exercises)}
    if plan.get("is_circuit"):
        for round_group, members in group_by_round(exercises):
            print(f"  Round {round_group + 1}")
            for ex in members:
                print("  " + format_exercise(positions[ex["id"]], ex, pin_status.get(ex["id"])))
        return

    for idx, ex in enumerate(exercises):
        print(format_exercise(idx, ex, pin_status.get(ex["id"])))


def open_stores(config):
    db_path = config["storage"]["db_path"]
    plans = PlanStore(db_path)
    plans.init_schema()
    templates = QuotaTemplateStore(db_path)
    templates.init_schema()
    return plans, templates


def load_pool(config, plan_store, source="library"):
    library = []
    plans = []
    if source in ("library", "both"):
        library = load_exercise_library(config["library"]["path"])
    if source in ("plans", "both"):
        plans = plan_store.load_plans()
    return build_pool_from_plans(plans, library)


def require_plan(plan_store, plan_id):
    plan = plan_store.get_plan(plan_id)
    if plan is None:
        raise KeyError(f"Plan not found: {plan_id}")
    return plan


def cmd_generate(args, config, plan_store, template_store):
    quotas = list(args.quota or [])
    is_circuit = args.circuit
    round_count = args.rounds

    if args.template:
        template = template_store.find_by_name(args.template)
        if template is None:
            raise KeyError(f"Quota template not found: {args.template}")
        quotas = template["quotas"] + quotas
        is_circuit = is_circuit or template["is_circuit"]
        round_count = round_count or template["round_count"]

    pool = load_pool(config, plan_store, args.source)
    result = generate_workout(
        quotas, pool, max_count=config["generation"]["max_quota_count"]
    )

    for warning in result["warnings"]:
        print(f"⚠ {warning}")
    if result["errors"]:
        print_section("GENERATION ERRORS")
        for error in result["errors"]:
            print(f"❌ {error}")
        return 1

    exercises = result["exercises"]
    if not exercises:
        print("\n❌ No exercises could be generated. Please adjust your quotas.")
        return 1

    if is_circuit and len(exercises) > 1:
        distributed = alternate_by_muscle_group(exercises, round_count)
        exercises = distributed["exercises"]
        for notice in distributed["notices"]:
            print(f"ℹ {notice}")

    plan = plan_store.create_plan(
        args.name or generate_plan_name(),
        exercises,
        is_circuit=is_circuit,
        is_generated=True,
        pin_status={},
    )
    print_section("GENERATED WORKOUT")
    print_plan(plan)
    return 0


def cmd_plans(args, config, plan_store, template_store):
    plans = plan_store.load_plans()
    if not plans:
        print("No saved plans.")
        return 0
    for plan in plans:
        print_plan(plan)
    return 0


def _editor_for(plan_id, config, plan_store, source):
    plan = require_plan(plan_store, plan_id)
    pool = load_pool(config, plan_store, source)
    return PlanEditor(plan, pool)


def cmd_reroll(args, config, plan_store, template_store):
    editor = _editor_for(args.plan_id, config, plan_store, args.source)
    result = editor.reroll(args.index)
    if not result["ok"]:
        print(f"⚠ {result['message']}")
        return 0
    plan = plan_store.save_plan(editor.commit())
    print(f"✓ Replaced {result['replaced']['name']} with {plan['exercises'][args.index]['name']}")
    print_plan(plan)
    return 0


def cmd_pin(args, config, plan_store, template_store):
    plan = require_plan(plan_store, args.plan_id)
    editor = PlanEditor(plan, pool={})
    if args.index < 0 or args.index >= len(editor.exercises):
        raise IndexError(f"No exercise at position {args.index}")
    slot_id = editor.exercises[args.index]["id"]
    pinned = editor.toggle_pin(slot_id)
    plan = plan_store.save_plan(editor.commit())
    print(f"✓ {'Pinned' if pinned else 'Unpinned'} {editor.exercises[args.index]['name']}")
    print_plan(plan)
    return 0


def cmd_regenerate(args, config, plan_store, template_store):
    editor = _editor_for(args.plan_id, config, plan_store, args.source)
    result = editor.regenerate()
    if not result["ok"]:
        print(f"⚠ {result['message']}")
        return 0
    plan = plan_store.save_plan(editor.commit())
    print_section("REGENERATED WORKOUT")
    print_plan(plan)
    return 0


def cmd_templates(args, config, plan_store, template_store):
    if args.action == "list":
        templates = template_store.load_templates()
        if not templates:
            print("No saved quota templates.")
        for template in templates:
            quotas = ", ".join(f"{q['tag']}={q['count']}" for q in template["quotas"])
            circuit = ""
            if template["is_circuit"]:
                circuit = f" [circuit, {template['round_count'] or 'auto'} rounds]"
            print(f"{template['id']}  {template['name']}: {quotas}{circuit}")
        return 0

    if args.action == "add":
        result = template_store.add_template(
            args.name, args.quota or [], is_circuit=args.circuit, round_count=args.rounds
        )
        if not result["success"]:
            print(f"❌ {result['message']}")
            return 1
        print(f"✓ Saved template {result['template']['name']} ({result['template']['id']})")
        return 0

    result = template_store.delete_template(args.template_id)
    if not result["success"]:
        print(f"❌ {result['message']}")
        return 1
    print("✓ Template deleted")
    return 0


def cmd_tags(args, config, plan_store, template_store):
    pool = load_pool(config, plan_store, args.source)
    summary = pool_summary(pool)
    if not summary:
        print("No muscle groups available.")
    for tag, count in summary.items():
        print(f"  {tag}: {count}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Generate and edit random workouts.")
    parser.add_argument("--config", default=None, help="Path to config.yaml.")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_source(p):
        p.add_argument(
            "--source",
            choices=["library", "plans", "both"],
            default="library",
            help="Where the exercise pool comes from.",
        )

    gen = sub.add_parser("generate", help="Generate a random workout from quotas.")
    gen.add_argument("--quota", action="append", type=parse_quota, help="TAG=COUNT, repeatable.")
    gen.add_argument("--template", help="Start from a saved quota template (by name).")
    gen.add_argument("--circuit", action="store_true", help="Distribute into circuit rounds.")
    gen.add_argument("--rounds", type=int, default=None, help="Fixed number of circuit rounds.")
    gen.add_argument("--name", help="Plan name (defaults to a dated name).")
    add_source(gen)
    gen.set_defaults(handler=cmd_generate)

    plans = sub.add_parser("plans", help="List saved plans.")
    plans.set_defaults(handler=cmd_plans)

    reroll = sub.add_parser("reroll", help="Replace one exercise in a plan.")
    reroll.add_argument("plan_id")
    reroll.add_argument("index", type=int)
    add_source(reroll)
    reroll.set_defaults(handler=cmd_reroll)

    pin = sub.add_parser("pin", help="Toggle the pin on one exercise.")
    pin.add_argument("plan_id")
    pin.add_argument("index", type=int)
    pin.set_defaults(handler=cmd_pin)

    regen = sub.add_parser("regenerate", help="Replace every unpinned exercise.")
    regen.add_argument("plan_id")
    add_source(regen)
    regen.set_defaults(handler=cmd_regenerate)

    templates = sub.add_parser("templates", help="Manage quota templates.")
    template_sub = templates.add_subparsers(dest="action", required=True)
    template_sub.add_parser("list")
    add = template_sub.add_parser("add")
    add.add_argument("name")
    add.add_argument("--quota", action="append", type=parse_quota, required=True)
    add.add_argument("--circuit", action="store_true")
    add.add_argument("--rounds", type=int, default=None)
    delete = template_sub.add_parser("delete")
    delete.add_argument("template_id")
    templates.set_defaults(handler=cmd_templates)

    tags = sub.add_parser("tags", help="Show muscle groups and pool sizes.")
    add_source(tags)
    tags.set_defaults(handler=cmd_tags)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    plan_store = template_store = None
    try:
        config = load_config(args.config)
        plan_store, template_store = open_stores(config)
        return args.handler(args, config, plan_store, template_store)
    except (KeyError, IndexError, ValueError, FileNotFoundError) as e:
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"\n❌ Error: {message}")
        return 1
    finally:
        if plan_store is not None:
            plan_store.close()
        if template_store is not None:
            template_store.close()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)
