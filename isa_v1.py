###############################################
# First revision of the control ROM: a single #
# 8-bit control word and only the NOP opcode. #
# Not bit-compatible with later revisions.    #
#                                             #
# v1 (0.0.1): initial breadboard version.     #
###############################################

from amaranth.lib import enum

from address import *
from control import *
from fields import *

# Program counter operations.
class PcOp( enum.Enum, shape = 2 ):
  NOTHING = 0b00
  LOAD    = 0b01
  INC     = 0b10
  DEC     = 0b11

class AddrBus1( enum.Enum, shape = 3 ):
  PC = 0b000

class AndLatch( enum.Enum, shape = 3 ):
  PC = 0b000

# Control word layout: [ field, bits ]
#   1:0 PC load / increment / decrement
#   4:2 AND latch source
#   7:5 address bus 1 source
PC         = Field( "pc", 0, PcOp )
AND_LATCH  = Field( "and_latch", 2, AndLatch )
ADDR_BUS_1 = Field( "addr_bus_1", 5, AddrBus1 )

LAYOUT = Layout( "v1", 8, [ PC, AND_LATCH, ADDR_BUS_1 ] )

# ROM address: [ 14:12 flags | 11:4 opcode | 3:0 don't care ]
ADDRESS_MAP = AddressMap( 15, opcode_shift = 4, opcode_width = 8,
                          flags_shift = 12, flags_width = 3 )

ADDR_BUS_1_ASSERT_PC = ADDR_BUS_1( AddrBus1.PC )
AND_LATCH_PC         = AND_LATCH( AndLatch.PC )
PC_DO_NOTHING        = PC( PcOp.NOTHING )
PC_LOAD              = PC( PcOp.LOAD )
PC_INC               = PC( PcOp.INC )
PC_DEC               = PC( PcOp.DEC )

IDLE = ADDR_BUS_1_ASSERT_PC | AND_LATCH_PC | PC_INC

OP_NOP = [ 0x00, "NOP" ]

def instruction_set():
  insns = InstructionSet( ADDRESS_MAP.opcode_width )
  insns.add( Instruction( OP_NOP[ 0 ], OP_NOP[ 1 ], IDLE ) )
  return insns

INSTRUCTIONS = instruction_set()

MICROCODE = Microcode( "v1", LAYOUT, ADDRESS_MAP, INSTRUCTIONS,
                       idle = IDLE )
