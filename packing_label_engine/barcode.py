"""
EAN-13 encoding into a 95 module bar pattern.
"""

# Standard Library
import dataclasses


# left hand digits, odd parity (L codes)
LEFT_ODD_PATTERNS = (
	"0001101", "0011001", "0010011", "0111101", "0100011",
	"0110001", "0101111", "0111011", "0110111", "0001011",
)
# left hand digits, even parity (G codes)
LEFT_EVEN_PATTERNS = (
	"0100111", "0110011", "0011011", "0100001", "0011101",
	"0111001", "0000101", "0010001", "0001001", "0010111",
)
# right hand digits (R codes)
RIGHT_PATTERNS = (
	"1110010", "1100110", "1101100", "1000010", "1011100",
	"1001110", "1010000", "1000100", "1001000", "1110100",
)
# parity of the six left digits, selected by the leading digit
FIRST_DIGIT_PARITY = (
	"OOOOOO", "OOEOEE", "OOEEOE", "OOEEEO", "OEOOEE",
	"OEEOOE", "OEEEOO", "OEOEOE", "OEOEEO", "OEEOEO",
)
START_GUARD = "101"
CENTER_GUARD = "01010"
END_GUARD = "101"
MODULE_COUNT = 95
PAYLOAD_LENGTH = 12


@dataclasses.dataclass(frozen=True)
class Ean13Symbol:
	digits: str
	pattern: str


#============================================
def is_valid_payload(payload: str | None) -> bool:
	"""
	Check for exactly twelve ASCII digits.
	"""
	if payload is None or len(payload) != PAYLOAD_LENGTH:
		return False
	return all(char in "0123456789" for char in payload)


#============================================
def compute_check_digit(payload: str) -> int:
	"""
	Compute the EAN-13 check digit of a twelve digit payload.

	Args:
		payload: Twelve digits.

	Returns:
		Check digit 0-9.
	"""
	if not is_valid_payload(payload):
		raise ValueError(f"EAN-13 payload must be {PAYLOAD_LENGTH} digits: {payload!r}")
	total = 0
	for index, char in enumerate(payload):
		weight = 3 if index % 2 == 1 else 1
		total += int(char) * weight
	return (10 - total % 10) % 10


#============================================
def encode_ean13(payload: str | None) -> Ean13Symbol | None:
	"""
	Encode a payload into its bar pattern.

	Invalid payloads produce None so callers can skip the barcode.

	Args:
		payload: Twelve digits.

	Returns:
		Ean13Symbol or None.
	"""
	if not is_valid_payload(payload):
		return None
	digits = payload + str(compute_check_digit(payload))
	parity = FIRST_DIGIT_PARITY[int(digits[0])]
	parts = [START_GUARD]
	for index, char in enumerate(digits[1:7]):
		if parity[index] == "O":
			parts.append(LEFT_ODD_PATTERNS[int(char)])
		else:
			parts.append(LEFT_EVEN_PATTERNS[int(char)])
	parts.append(CENTER_GUARD)
	for char in digits[7:]:
		parts.append(RIGHT_PATTERNS[int(char)])
	parts.append(END_GUARD)
	pattern = "".join(parts)
	return Ean13Symbol(digits=digits, pattern=pattern)


#============================================
def pattern_to_bars(pattern: str) -> list[tuple[int, int]]:
	"""
	Collapse a module pattern into dark runs.

	Args:
		pattern: String of 0 and 1 modules.

	Returns:
		List of (start_module, module_count) for each dark run.
	"""
	bars: list[tuple[int, int]] = []
	run_start = None
	for index, module in enumerate(pattern):
		if module == "1" and run_start is None:
			run_start = index
		elif module != "1" and run_start is not None:
			bars.append((run_start, index - run_start))
			run_start = None
	if run_start is not None:
		bars.append((run_start, len(pattern) - run_start))
	return bars
