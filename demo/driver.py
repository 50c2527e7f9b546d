"""
Demonstration driver for the xc220b3 secure channel.

Wires two in-process sessions together and shows:
- Public key exchange and key agreement
- An encrypted round trip
- Rejection of a tampered message
- An optional interactive loop
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout

from xc220b3.config import DemoConfig
from xc220b3.primitives import MacMismatch, MalformedCiphertext
from xc220b3.session import Session


logger = logging.getLogger(__name__)


def tamper_with(data: bytes, many_times: int, rng: Optional[random.Random] = None) -> bytes:
    """
    Overwrite randomly chosen bytes with random values.

    A random overwrite can reproduce the byte already in place, so the
    result is not guaranteed to differ from the input.

    Args:
        data: Bytes to tamper with
        many_times: Number of overwrites
        rng: Random generator, defaults to a fresh one

    Returns:
        Tampered copy of data
    """
    if rng is None:
        rng = random.Random()

    tampered = bytearray(data)
    for _ in range(many_times):
        index = rng.randrange(len(tampered))
        tampered[index] = rng.randrange(256)
    return bytes(tampered)


def flip_byte(data: bytes, index: int) -> bytes:
    """Return a copy of data with every bit of one byte inverted"""
    flipped = bytearray(data)
    flipped[index] ^= 0xFF
    return bytes(flipped)


@dataclass
class DemoReport:
    """
    Outcome of a demo run.

    Attributes:
        ciphertext: Encrypted message as produced by the sender
        decrypted: Plaintext recovered by the receiver
        tampered: Tampered ciphertext handed to the receiver
        tamper_detected: True if the receiver rejected the tampered message
    """
    ciphertext: bytes
    decrypted: bytes
    tampered: bytes
    tamper_detected: bool


class ChannelDemo:
    """
    Two sessions connected in process.
    """

    def __init__(self, config: DemoConfig, rng: Optional[random.Random] = None):
        """
        Initialize the demo and perform the key exchange.

        Args:
            config: Demo settings
            rng: Random generator used for tampering
        """
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.sender = Session()
        self.receiver = Session()
        self.tamper = False

        logger.debug("sender pk: %s", self.sender.public_key_hex)
        logger.debug("receiver pk: %s", self.receiver.public_key_hex)

        # Keys are exchanged out of band; authenticating them is the caller's job
        self.sender.establish(self.receiver.public_key)
        self.receiver.establish(self.sender.public_key)

    def deliver(self, plaintext: bytes) -> Optional[bytes]:
        """
        Encrypt with the sender and decrypt with the receiver.

        Returns:
            Decrypted plaintext, or None if the receiver rejected the message
        """
        ciphertext = self.sender.encrypt(plaintext)
        if self.tamper:
            ciphertext = tamper_with(ciphertext, self.config.tamper_count, self.rng)

        print(f"Encrypted: {ciphertext.hex()}")
        try:
            return self.receiver.decrypt(ciphertext)
        except (MacMismatch, MalformedCiphertext) as e:
            logger.error("Error: %s", e)
            return None

    def run(self) -> DemoReport:
        """Run the round trip and the tampering scenario"""
        logger.info("== xc220b3 demo ==")
        logger.info("Message: %r", self.config.message)

        plain = self.config.message.encode("utf-8")

        ciphertext = self.sender.encrypt(plain)
        decrypted = self.receiver.decrypt(ciphertext)
        logger.info("Decrypted: %r", decrypted.decode("utf-8"))

        logger.info("Now attempting message modification...")
        tampered = tamper_with(self.sender.encrypt(plain), self.config.tamper_count, self.rng)
        logger.info("Tampered Encrypted: %s", tampered.hex())

        try:
            self.receiver.decrypt(tampered)
            detected = False
            logger.warning("Tampered message was accepted; overwrite reproduced the original bytes")
        except MacMismatch:
            detected = True
            logger.info("MAC mismatch! Message was tampered with! (expected)")

        return DemoReport(
            ciphertext=ciphertext,
            decrypted=decrypted,
            tampered=tampered,
            tamper_detected=detected
        )

    async def run_interactive(self):
        """Run interactive encrypt/decrypt loop"""
        session = PromptSession()

        print("\nCommands:")
        print("  /tamper on|off - Toggle tampering of outgoing messages")
        print("  /quit - Quit application")
        print()

        while True:
            try:
                prompt_text = "[tamper] > " if self.tamper else "> "
                with patch_stdout():
                    user_input = await session.prompt_async(prompt_text)
            except (KeyboardInterrupt, EOFError):
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                if not self._handle_command(user_input):
                    break
                continue

            plaintext = self.deliver(user_input.encode("utf-8"))
            if plaintext is None:
                print("[Message rejected: MAC mismatch]")
            else:
                print(f"Decrypted: {plaintext.decode('utf-8')}")

    def _handle_command(self, command: str) -> bool:
        """Handle slash commands; returns False to quit"""
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()

        if cmd == "/quit":
            return False
        elif cmd == "/tamper" and len(parts) == 2 and parts[1].lower() in ("on", "off"):
            self.tamper = parts[1].lower() == "on"
            print(f"Tampering {'enabled' if self.tamper else 'disabled'}")
        else:
            print("Unknown command. Use /tamper on|off or /quit.")
        return True


def run_demo(config: DemoConfig, rng: Optional[random.Random] = None) -> DemoReport:
    """Run the non-interactive demo"""
    return ChannelDemo(config, rng).run()


def run_interactive(config: DemoConfig):
    """Run the interactive demo"""
    asyncio.run(ChannelDemo(config).run_interactive())
