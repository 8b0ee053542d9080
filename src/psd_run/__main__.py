import argparse
import json
import logging
from typing import Optional

from psd_run.api.session import RenderedImage, Session
from psd_run.errors import PSDRunError
from psd_run.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="psd-run command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render the document as PNG")
    render_parser.add_argument("input_file", help="Input PSD file")
    render_parser.add_argument("output_file", help="Output image file")
    render_parser.add_argument(
        "--hide", type=int, nargs="+", default=[], metavar="ID", help="Layers to hide"
    )
    render_parser.add_argument(
        "--show", type=int, nargs="+", default=[], metavar="ID", help="Layers to show"
    )

    layer_parser = subparsers.add_parser("layer", help="Export a single layer")
    layer_parser.add_argument("input_file", help="Input PSD file")
    layer_parser.add_argument("layer_id", type=int, help="Layer id")
    layer_parser.add_argument("output_file", help="Output image file")

    tree_parser = subparsers.add_parser("tree", help="Show the layer tree as JSON")
    tree_parser.add_argument("input_file", help="Input PSD file")

    hints_parser = subparsers.add_parser("hints", help="Show the export hints")
    hints_parser.add_argument("input_file", help="Input PSD file")
    hints_parser.add_argument("--restore", metavar="FILE", help="Hints JSON to apply")

    text_parser = subparsers.add_parser(
        "text", help="Replace the text of a layer and render"
    )
    text_parser.add_argument("input_file", help="Input PSD file")
    text_parser.add_argument("layer_id", type=int, help="Text layer id")
    text_parser.add_argument("text", help="New text")
    text_parser.add_argument("output_file", help="Output image file")

    return parser.parse_args(argv)


def _save(image: RenderedImage, output_file: str) -> None:
    pil_image = image.topil()
    if pil_image is None:
        logger.warning("Nothing to save")
        return
    pil_image.save(output_file)
    logger.info("Saved %dx%d image to %s" % (image.width, image.height, output_file))


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    if args.verbose:
        logging.getLogger("psd_run").setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    with open(args.input_file, "rb") as f:
        data = f.read()

    with Session() as session:
        try:
            handle = session.load_document(data).handle

            if args.command == "render":
                _save(session.render(handle, args.hide, args.show), args.output_file)

            elif args.command == "layer":
                _save(session.get_layer_image(handle, args.layer_id), args.output_file)

            elif args.command == "tree":
                tree = json.loads(session.export_layer_tree(handle))
                print(json.dumps(tree, indent=2))

            elif args.command == "hints":
                if args.restore:
                    with open(args.restore, "r") as f:
                        restored = session.set_hints(handle, f.read())
                    logger.info("Restored %d hints" % restored)
                print(session.get_hints(handle))

            elif args.command == "text":
                session.set_layer_text(handle, args.layer_id, args.text)
                _save(session.render(handle), args.output_file)

        except PSDRunError as e:
            logger.error("%s: %s" % (e.code, e.message))
            return 1

    return None


if __name__ == "__main__":
    main()
