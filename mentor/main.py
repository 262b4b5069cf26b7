import argparse
import asyncio
import logging
import sys

from mentor.ai_client_gemini import ImagePart
from mentor.exceptions import NoApiKeysError
from mentor.logging_conf import setup_logging
from mentor.service import MentorService

logger = logging.getLogger(__name__)


async def chat_loop(service: MentorService):
    """Reads messages from stdin until EOF or 'sair'."""
    print("Mentor pronto. Digite 'sair' para encerrar.")
    while True:
        try:
            message = input("> ").strip()
        except EOFError:
            break
        if not message:
            continue
        if message.lower() in ("sair", "exit", "quit"):
            break
        print(await service.send_message_to_gemini(message))


async def run(args: argparse.Namespace) -> int:
    try:
        service = MentorService()
    except NoApiKeysError as e:
        logger.critical(str(e))
        return 1

    if args.mind_map:
        result = await service.generate_mind_map_text(args.mind_map)
        if result is None:
            logger.error("Mind map could not be generated with any API key.")
            return 1
        print(result)
        return 0

    if args.message:
        image_part = ImagePart.from_file(args.image) if args.image else None
        print(await service.send_message_to_gemini(args.message, image_part))
        return 0

    await chat_loop(service)
    return 0


def main():
    """Command-line front end for the Mentor."""
    parser = argparse.ArgumentParser(description="Converse com o Mentor (Gemini).")
    parser.add_argument('message', nargs='?', help="Envia uma única mensagem e sai.")
    parser.add_argument('--image', help="Caminho de uma imagem anexada à mensagem.")
    parser.add_argument('--mind-map', metavar='TOPIC', help="Gera um mapa mental para o tema e sai.")
    args = parser.parse_args()

    if args.image and not args.message:
        parser.error("--image requires a message")

    setup_logging()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
