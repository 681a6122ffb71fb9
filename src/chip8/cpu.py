"""
CHIP-8 CPU
Fetches, decodes and executes one instruction per step.

Random numbers, key waits and delay timer reads cannot be completed by the
CPU itself. For those, step() returns a NEEDS_* signal without touching PC
or any register, and the host finishes the instruction with the matching
supply_*() call. PC still points at the suspended instruction, so the resume
path decodes it again with the same decode() used by the dispatcher.
"""
import logging

import cython

from .decode import decode, disassemble
from .framebuffer import SpriteEdge
from .memory import FONT_START, GLYPH_HEIGHT
from .signals import Signal, ProtocolError
from .state import FLAG_REGISTER, INSTRUCTION_SIZE, KEY_COUNT, STACK_DEPTH

logger = logging.getLogger(__name__)


class CPU:
    def __init__(self, state, sprite_edge=SpriteEdge.CLIP, debug=False):
        self.state = state
        self.sprite_edge = SpriteEdge(sprite_edge)
        self.debug = debug

        # Signal the CPU is suspended on, None when ready
        self.suspended = None
        self.instructions: cython.longlong = 0

        self.instruction_table = self._build_instruction_table()
        self.alu_table = self._build_alu_table()
        self.misc_table = self._build_misc_table()

    def _build_instruction_table(self):
        """Handlers indexed by the top nibble of the instruction word"""
        return (
            self._system,           # 0x0: CLS, RET
            self._jump,             # 0x1: JP nnn
            self._call,             # 0x2: CALL nnn
            self._skip_eq_imm,      # 0x3: SE Vx, nn
            self._skip_ne_imm,      # 0x4: SNE Vx, nn
            self._skip_eq_reg,      # 0x5: SE Vx, Vy
            self._load_imm,         # 0x6: LD Vx, nn
            self._add_imm,          # 0x7: ADD Vx, nn
            self._alu,              # 0x8: register arithmetic/logic
            self._skip_ne_reg,      # 0x9: SNE Vx, Vy
            self._load_index,       # 0xA: LD I, nnn
            self._jump_offset,      # 0xB: JP V0, nnn
            self._random,           # 0xC: RND Vx, nn
            self._draw,             # 0xD: DRW Vx, Vy, n
            self._key_skip,         # 0xE: SKP / SKNP
            self._misc,             # 0xF: timers, I, BCD, register dump/load
        )

    def _build_alu_table(self):
        """8xyN handlers indexed by N"""
        return {
            0x0: self._alu_ld,
            0x1: self._alu_or,
            0x2: self._alu_and,
            0x3: self._alu_xor,
            0x4: self._alu_add,
            0x5: self._alu_sub,
            0x6: self._alu_shr,
            0x7: self._alu_subn,
            0xE: self._alu_shl,
        }

    def _build_misc_table(self):
        """FxNN handlers indexed by NN"""
        return {
            0x07: self._read_delay,
            0x0A: self._wait_key,
            0x15: self._set_delay,
            0x18: self._set_sound,
            0x1E: self._add_index,
            0x29: self._font_address,
            0x33: self._store_bcd,
            0x55: self._register_dump,
            0x65: self._register_load,
        }

    @property
    def ready(self):
        return self.suspended is None

    def current_word(self):
        """Instruction word at PC, or None if PC is out of range"""
        return self.state.fetch_word()

    def step(self):
        """Execute one instruction and report what happened"""
        if self.suspended is not None:
            raise ProtocolError(f"step() called while waiting for {self.suspended.name}")

        word = self.state.fetch_word()
        if word is None:
            return Signal.FETCH_OUT_OF_BOUNDS

        ins = decode(word)
        if self.debug:
            logger.debug("%03X: %04X  %-16s %s", self.state.pc, word, disassemble(word),
                         self.state.register_dump())

        signal = self.instruction_table[ins.family](ins)

        if signal.is_suspension:
            self.suspended = signal
        elif not signal.is_error:
            self.instructions += 1
        return signal

    def _advance(self, count: cython.int = 1):
        self.state.pc += INSTRUCTION_SIZE * count

    def _skip_if(self, condition):
        self._advance(2 if condition else 1)
        return Signal.OK

    # === Deferred completion ===

    def _resume(self, expected):
        if self.suspended != expected:
            waiting = self.suspended.name if self.suspended is not None else "nothing"
            raise ProtocolError(f"Cannot complete {expected.name}: CPU is waiting for {waiting}")

        # PC was not advanced at suspension, so this is the same instruction
        ins = decode(self.state.fetch_word())
        self.suspended = None
        self.instructions += 1
        self._advance()
        return ins

    def supply_random(self, value):
        """Complete RND Vx, nn with a random byte"""
        _check_byte(value, "Random value")
        ins = self._resume(Signal.NEEDS_RANDOM)
        self.state.registers[ins.x] = value & ins.nn

    def supply_key(self, key):
        """Complete LD Vx, K with the pressed key"""
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key index out of range: {key}")
        ins = self._resume(Signal.NEEDS_KEY)
        self.state.registers[ins.x] = key

    def supply_delay(self, ticks):
        """Complete LD Vx, DT with the delay timer's remaining ticks"""
        _check_byte(ticks, "Delay ticks")
        ins = self._resume(Signal.NEEDS_DELAY)
        self.state.registers[ins.x] = ticks

    # === Opcode families ===

    def _system(self, ins):
        state = self.state
        if ins.word == 0x00E0:  # CLS
            state.framebuffer.clear()
            self._advance()
            return Signal.DISPLAY_CHANGED
        elif ins.word == 0x00EE:  # RET
            if not state.stack:
                return Signal.STACK_UNDERFLOW
            state.pc = state.stack.pop() + INSTRUCTION_SIZE
            return Signal.OK
        # 0nnn machine code routines are not supported
        return Signal.INVALID_INSTRUCTION

    def _jump(self, ins):
        self.state.pc = ins.nnn
        return Signal.OK

    def _call(self, ins):
        state = self.state
        if len(state.stack) >= STACK_DEPTH:
            return Signal.STACK_OVERFLOW
        state.stack.append(state.pc)
        state.pc = ins.nnn
        return Signal.OK

    def _skip_eq_imm(self, ins):
        return self._skip_if(self.state.registers[ins.x] == ins.nn)

    def _skip_ne_imm(self, ins):
        return self._skip_if(self.state.registers[ins.x] != ins.nn)

    def _skip_eq_reg(self, ins):
        if ins.n != 0:
            return Signal.INVALID_INSTRUCTION
        v = self.state.registers
        return self._skip_if(v[ins.x] == v[ins.y])

    def _skip_ne_reg(self, ins):
        if ins.n != 0:
            return Signal.INVALID_INSTRUCTION
        v = self.state.registers
        return self._skip_if(v[ins.x] != v[ins.y])

    def _load_imm(self, ins):
        self.state.registers[ins.x] = ins.nn
        self._advance()
        return Signal.OK

    def _add_imm(self, ins):
        # No carry flag for the immediate form
        v = self.state.registers
        v[ins.x] = (v[ins.x] + ins.nn) & 0xFF
        self._advance()
        return Signal.OK

    def _load_index(self, ins):
        self.state.index = ins.nnn
        self._advance()
        return Signal.OK

    def _jump_offset(self, ins):
        self.state.pc = ins.nnn + self.state.registers[0]
        return Signal.OK

    def _random(self, ins):
        return Signal.NEEDS_RANDOM

    def _draw(self, ins):
        state = self.state
        v = state.registers
        if not state.memory.in_range(state.index, ins.n):
            return Signal.SPRITE_OUT_OF_BOUNDS

        rows = state.memory.read_block(state.index, ins.n)
        collision = state.framebuffer.draw_sprite(rows, v[ins.x], v[ins.y], self.sprite_edge)
        v[FLAG_REGISTER] = 1 if collision else 0
        self._advance()
        return Signal.DISPLAY_CHANGED

    def _key_skip(self, ins):
        if ins.nn not in (0x9E, 0xA1):
            return Signal.INVALID_INSTRUCTION
        key = self.state.registers[ins.x]
        if key >= KEY_COUNT:
            return Signal.BAD_KEY_INDEX
        pressed = self.state.is_key_pressed(key)
        return self._skip_if(pressed if ins.nn == 0x9E else not pressed)

    # === 8xyN ===

    def _alu(self, ins):
        handler = self.alu_table.get(ins.n)
        if handler is None:
            return Signal.INVALID_INSTRUCTION
        handler(ins.x, ins.y)
        self._advance()
        return Signal.OK

    def _alu_ld(self, x, y):
        v = self.state.registers
        v[x] = v[y]

    def _alu_or(self, x, y):
        v = self.state.registers
        v[x] |= v[y]

    def _alu_and(self, x, y):
        v = self.state.registers
        v[x] &= v[y]

    def _alu_xor(self, x, y):
        v = self.state.registers
        v[x] ^= v[y]

    # VF is written last in the flag-producing ops, so VF as an operand
    # ends up holding the flag.

    def _alu_add(self, x, y):
        v = self.state.registers
        result = v[x] + v[y]
        v[x] = result & 0xFF
        v[FLAG_REGISTER] = 1 if result > 0xFF else 0

    def _alu_sub(self, x, y):
        v = self.state.registers
        no_borrow = v[x] >= v[y]
        v[x] = (v[x] - v[y]) & 0xFF
        v[FLAG_REGISTER] = 1 if no_borrow else 0

    def _alu_subn(self, x, y):
        v = self.state.registers
        no_borrow = v[y] >= v[x]
        v[x] = (v[y] - v[x]) & 0xFF
        v[FLAG_REGISTER] = 1 if no_borrow else 0

    def _alu_shr(self, x, y):
        # Shifts VX in place; VY is ignored
        v = self.state.registers
        carry = v[x] & 0x01
        v[x] >>= 1
        v[FLAG_REGISTER] = carry

    def _alu_shl(self, x, y):
        v = self.state.registers
        carry = (v[x] >> 7) & 0x01
        v[x] = (v[x] << 1) & 0xFF
        v[FLAG_REGISTER] = carry

    # === FxNN ===

    def _misc(self, ins):
        handler = self.misc_table.get(ins.nn)
        if handler is None:
            return Signal.INVALID_INSTRUCTION
        return handler(ins.x)

    def _read_delay(self, x):
        return Signal.NEEDS_DELAY

    def _wait_key(self, x):
        return Signal.NEEDS_KEY

    def _set_delay(self, x):
        self.state.delay_value = self.state.registers[x]
        self._advance()
        return Signal.DELAY_TIMER_WRITTEN

    def _set_sound(self, x):
        self.state.sound_value = self.state.registers[x]
        self._advance()
        return Signal.SOUND_TIMER_WRITTEN

    def _add_index(self, x):
        state = self.state
        state.index = (state.index + state.registers[x]) & 0xFFFF
        self._advance()
        return Signal.OK

    def _font_address(self, x):
        digit = self.state.registers[x]
        if digit > 0xF:
            return Signal.BAD_FONT_DIGIT
        self.state.index = FONT_START + digit * GLYPH_HEIGHT
        self._advance()
        return Signal.OK

    def _store_bcd(self, x):
        state = self.state
        if not state.memory.in_range(state.index, 3):
            return Signal.BCD_OUT_OF_BOUNDS
        value = state.registers[x]
        state.memory.write_byte(state.index, value // 100)
        state.memory.write_byte(state.index + 1, (value // 10) % 10)
        state.memory.write_byte(state.index + 2, value % 10)
        self._advance()
        return Signal.OK

    def _register_dump(self, x):
        state = self.state
        if not state.memory.in_range(state.index, x + 1):
            return Signal.REGISTER_DUMP_OUT_OF_BOUNDS
        for i in range(x + 1):
            state.memory.write_byte(state.index + i, state.registers[i])
        self._advance()
        return Signal.OK

    def _register_load(self, x):
        state = self.state
        if not state.memory.in_range(state.index, x + 1):
            return Signal.REGISTER_LOAD_OUT_OF_BOUNDS
        for i in range(x + 1):
            state.registers[i] = state.memory.read_byte(state.index + i)
        self._advance()
        return Signal.OK


def _check_byte(value, what):
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{what} out of range: {value}")
