"""
Bloggen - AI-powered generator for SEO-optimized IT job market blog posts.

Commands: generate, analyze, rewrite, list, cleanup, info.
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .clients.gemini import GeminiClient
from .config import Settings, load_settings
from .content_generator import GENERATION_MODEL_CHAIN, ContentGenerator
from .errors import BloggenError, ConfigurationError, GenerationError
from .post_store import PostStore
from .rewriter import DEFAULT_TARGET_SCORE, ContentRewriter
from .schemas import SEOReport, Workflow
from .seo_system import SEOOptimizer
from .workflow_parser import PARSER_MODEL_CHAIN, WorkflowParser

logger = logging.getLogger(__name__)

DEFAULT_ANALYZE_KEYWORD = "IT jobs"
DEFAULT_REWRITE_KEYWORD = "IT job market"

IT_TOPIC_KEYWORDS = [
    "developer", "programming", "software", "tech", "engineer", "coding",
    "job", "career", "salary", "remote", "skills", "hiring", "interview",
    "market", "trends", "javascript", "python", "java", "react", "node",
    "devops", "data", "cloud", "cybersecurity",
]

PRIORITY_LABELS = {"high": "HIGH", "medium": "MED", "low": "LOW"}

EXAMPLES = """
Examples:
  bloggen generate "Create a comprehensive Python career guide"
  bloggen generate "Write a beginner tutorial on React hooks under 500 words"
  bloggen generate "Compare Vue and React for job seekers" --preview
  bloggen analyze blog-posts/2025-01-01-10-00-00-python-jobs.txt --keyword "Python"
  bloggen rewrite blog-posts/2025-01-01-10-00-00-python-jobs.txt --target-score 90
"""


def is_it_topic(topic: str) -> bool:
    topic_lower = topic.lower()
    # "IT" only counts as a whole word
    return "it" in re.findall(r"[a-z]+", topic_lower) or any(keyword in topic_lower for keyword in IT_TOPIC_KEYWORDS)


def make_store(settings: Settings) -> PostStore:
    return PostStore(settings.output_dir, settings.website_url, settings.author_name)


def initialize_system(settings: Settings) -> Dict:
    """Initialize the generation client and everything built on it."""
    settings.require_api_key()

    gemini_client = GeminiClient(
        api_key=settings.gemini_api_key,
        openrouter_api_key=settings.openrouter_api_key,
        site_url=settings.website_url,
        site_name=settings.site_name,
    )
    generator = ContentGenerator(gemini_client, settings.website_url)
    optimizer = SEOOptimizer(settings.website_url, settings.site_name)

    return {
        "gemini": gemini_client,
        "parser": WorkflowParser(gemini_client),
        "generator": generator,
        "optimizer": optimizer,
        "rewriter": ContentRewriter(generator, optimizer),
        "store": make_store(settings),
    }


# --- OUTPUT ---

def print_suggestions(report: SEOReport, title: str = "💡 SEO Suggestions:"):
    if not report.suggestions:
        print("✅ No optimization suggestions - content is well optimized!")
        return
    print(f"\n{title}")
    for index, suggestion in enumerate(report.suggestions, 1):
        print(f"   {index}. [{PRIORITY_LABELS[suggestion.priority]}] {suggestion.message}")


def print_workflow(workflow: Workflow):
    print("\n📋 Parsed Workflow & Constraints:")
    print(f"Content Type: {workflow.content_type}")
    print(f"Topic: {workflow.topic}")
    print(f"Audience: {workflow.audience.level}")

    length = workflow.length_constraints
    if length.word_limit:
        print(f"📏 Length: {length.constraint_type} {length.word_limit} words ({length.priority})")
        print(f"   Reasoning: {length.reasoning}")

    style = workflow.style_constraints
    print(f"Style: {style.tone} tone, {style.complexity} complexity")
    print(f"Keywords: {', '.join(workflow.seo_keywords)}")

    if workflow.fallback_used:
        print("⚠️ Used fallback parsing - results may be less accurate")


# --- COMMANDS ---

def run_generate(args: argparse.Namespace, settings: Settings) -> int:
    instruction = " ".join(args.instruction).strip()
    if not instruction:
        print("❌ Please provide an instruction or topic")
        print('Example: bloggen generate "Remote Python developer jobs"')
        return 1

    components = initialize_system(settings)
    parser = components["parser"]

    workflow = parser.parse_instruction(instruction)
    print("✅ Instruction parsed successfully!")
    print_workflow(workflow)

    if not is_it_topic(workflow.topic):
        print("⚠️ Topic may not be IT job market related")
        print("For best results, include IT/tech terms like: developer, programming, tech jobs, etc.")

    validation = parser.validate_constraints(workflow)
    if validation.conflicts:
        print("\n⚠️ Constraint Conflicts Detected:")
        for conflict in validation.conflicts:
            print(f"   • {conflict.message}")
            print(f"     Suggestion: {conflict.suggestion}")
    if validation.warnings:
        print("\n💡 Constraint Warnings:")
        for warning in validation.warnings:
            print(f"   • {warning.message}")
    for issue in validation.critical_issues:
        print(f"🚨 {issue}")

    if args.preview:
        print("\n🔍 Full Workflow Details:")
        print(workflow.model_dump_json(indent=2))
        return 0

    generator = components["generator"]
    if args.prompt:
        print(f"🎯 Custom prompt: {args.prompt[:100]}")
        draft = generator.generate_content(workflow.topic, custom_prompt=args.prompt)
    else:
        draft = generator.generate_workflow_content(workflow)

    report = components["optimizer"].optimize_content(draft.content, workflow.topic, draft.model_dump())
    saved = components["store"].save_post(draft, report, filename=args.output, directory=args.dir)

    print("\n✅ Blog post generated and optimized!")
    print(f"📄 File: {saved.filepath}")
    print(f"🎯 Content Type: {workflow.content_type} for {workflow.audience.level}")
    print(f"📊 Word count: {draft.word_count}")
    if draft.trimmed:
        print(f"✂️ Trimmed from {draft.original_word_count} words to meet the limit")
    print(f"🔍 SEO Score: {report.seo_score.grade} ({report.seo_score.percentage}%)")
    print(f"🤖 Model: {draft.model_used}")
    print_suggestions(report)
    return 0


def run_analyze(args: argparse.Namespace, settings: Settings) -> int:
    store = make_store(settings)
    content, _ = store.read_post(args.file)
    keyword = args.keyword or DEFAULT_ANALYZE_KEYWORD

    report = SEOOptimizer(settings.website_url, settings.site_name).optimize_content(content, keyword)
    analysis = report.analysis
    score = report.seo_score

    print(f"\n📊 SEO Analysis for: {args.file}\n")
    print(f"🎯 Overall SEO Score: {score.grade} ({score.percentage}%)")
    print(f"   Score: {score.score}/{score.max_score} points\n")
    print("📈 Content Metrics:")
    print(f"   📝 Word Count: {analysis.word_count}")
    print(f"   🔑 Keyword Density: {analysis.keyword_analysis.primary.density:.1f}%")
    print(f"   📖 Readability: {analysis.readability.grade} ({analysis.readability.readability_score}/100)")
    print(f"   🔗 Internal Links: {analysis.internal_links.count}")
    headings = analysis.heading_structure
    print(f"   📋 Headings: H1({headings.h1}) H2({headings.h2}) H3({headings.h3})")
    print_suggestions(report, "💡 Optimization Suggestions:")
    return 0


def run_rewrite(args: argparse.Namespace, settings: Settings) -> int:
    components = initialize_system(settings)
    store = components["store"]

    print(f"📄 Analyzing: {args.file}")
    content, topic = store.read_post(args.file)
    keyword = args.keyword or topic or DEFAULT_REWRITE_KEYWORD

    result = components["rewriter"].rewrite(content, keyword, args.target_score, topic=topic or keyword)
    before = result.original_report.seo_score
    print(f"\n📊 Current SEO Score: {before.grade} ({before.percentage}%)")

    if result.already_optimized:
        print(f"✅ Content already meets target score of {args.target_score}%")
        return 0

    source = Path(args.file)
    filename = args.output or f"{source.stem}-improved.txt"
    saved = store.save_post(result.draft, result.report, filename=filename,
                            directory=args.dir or str(source.parent))

    after = result.report.seo_score
    improvement = f"+{result.improvement}" if result.improvement > 0 else str(result.improvement)
    print("\n✅ Blog post rewritten and optimized!")
    print(f"📄 New file: {saved.filepath}")
    print(f"📊 SEO improvement: {before.percentage}% → {after.percentage}% ({improvement} points)")
    print(f"🎯 Grade improvement: {before.grade} → {after.grade}")
    print(f"📝 Word count: {result.draft.word_count}")
    print(f"🔑 Keyword density: {result.report.analysis.keyword_analysis.primary.density:.1f}%")
    print(f"📖 Readability: {result.report.analysis.readability.grade}")
    print_suggestions(result.report, "💡 Remaining optimization opportunities:")
    return 0


def run_list(args: argparse.Namespace, settings: Settings) -> int:
    posts = make_store(settings).list_posts(args.dir)
    if not posts:
        print("No blog posts found.")
        return 0

    print(f"\n📚 Found {len(posts)} blog posts:\n")
    for index, post in enumerate(posts, 1):
        print(f"{index}. {post.filename}")
        print(f"   📊 {post.word_count} words | 💾 {round(post.size / 1024)}KB")
        print(f"   📅 Created: {post.created:%Y-%m-%d}\n")
    return 0


def run_cleanup(args: argparse.Namespace, settings: Settings) -> int:
    result = make_store(settings).cleanup_old_posts(args.keep, args.dir)
    print("✅ Cleanup complete!")
    print(f"🗑️ Deleted: {result['deleted']} files")
    print(f"📚 Kept: {result['kept']} files")
    return 0


def run_info(args: argparse.Namespace, settings: Settings) -> int:
    print("📊 Configuration Status:")
    print(f"API Key: {'✅ Set' if settings.gemini_api_key else '❌ Not set'}")
    print(f"OpenRouter Key: {'✅ Set' if settings.openrouter_api_key else '❌ Not set'}")
    print(f"Website URL: {settings.website_url}")
    print(f"Output Directory: {settings.output_dir}")
    print("")

    if not settings.gemini_api_key and not settings.openrouter_api_key:
        print("⚠️ Missing API key in .env file")
        print("Create a .env file with: GEMINI_API_KEY=your_key")
        print("")

    print("🤖 Available Flash Models:")
    for index, model in enumerate(GENERATION_MODEL_CHAIN):
        label = " (Primary)" if index == 0 else " (Fallback)" if index == len(GENERATION_MODEL_CHAIN) - 1 else ""
        print(f"- {model}{label}")
    print("")
    print("🧠 Instruction Parsing Models:")
    for model, description in PARSER_MODEL_CHAIN:
        print(f"- {model} ({description})")
    return 0


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloggen",
        description="AI-powered CLI for generating SEO-optimized IT job market blog posts",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate content from a natural language instruction")
    generate.add_argument("instruction", nargs="+", help="Instruction or topic (IT job market focused)")
    generate.add_argument("-p", "--prompt", help="Custom prompt for content generation")
    generate.add_argument("--preview", action="store_true", help="Show parsed workflow without generating content")
    generate.add_argument("-o", "--output", help="Output filename (default: auto-generated)")
    generate.add_argument("-d", "--dir", help="Output directory")
    generate.set_defaults(func=run_generate)

    analyze = subparsers.add_parser("analyze", help="Analyze SEO quality of an existing blog post")
    analyze.add_argument("file", help="Post file to analyze")
    analyze.add_argument("-k", "--keyword", help=f"Primary keyword (default: {DEFAULT_ANALYZE_KEYWORD})")
    analyze.set_defaults(func=run_analyze)

    rewrite = subparsers.add_parser("rewrite", help="Analyze and rewrite a blog post for better SEO")
    rewrite.add_argument("file", help="Post file to rewrite")
    rewrite.add_argument("-k", "--keyword", help="Primary keyword to optimize for (default: post topic)")
    rewrite.add_argument("-t", "--target-score", type=int, default=DEFAULT_TARGET_SCORE,
                         help=f"Target SEO score (default: {DEFAULT_TARGET_SCORE})")
    rewrite.add_argument("-o", "--output", help="Output filename for rewritten content")
    rewrite.add_argument("-d", "--dir", help="Output directory (default: next to the original)")
    rewrite.set_defaults(func=run_rewrite)

    list_cmd = subparsers.add_parser("list", help="List all generated blog posts")
    list_cmd.add_argument("-d", "--dir", help="Directory to list from")
    list_cmd.set_defaults(func=run_list)

    cleanup = subparsers.add_parser("cleanup", help="Clean up old blog posts")
    cleanup.add_argument("-k", "--keep", type=non_negative_int, default=10, help="Number of posts to keep (default: 10)")
    cleanup.add_argument("-d", "--dir", help="Directory to clean")
    cleanup.set_defaults(func=run_cleanup)

    info = subparsers.add_parser("info", help="Show API configuration and model status")
    info.set_defaults(func=run_info)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug(f"Running command: {args.command}")

    try:
        return args.func(args, settings)
    except ConfigurationError as e:
        print(f"❌ {e}")
        print("💡 Get your free Gemini API key at: https://makersuite.google.com/app/apikey")
        return 1
    except GenerationError as e:
        print(f"\n❌ Generation failed: {e}")
        print(f"💡 {e.remedy}")
        return 1
    except BloggenError as e:
        print(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
