###############################################
# Control ROM definitions for the 16-bit      #
# breadboard CPU: 64-bit control word, 12-bit #
# opcodes and conditional execution.          #
#                                             #
# v5: current revision; supersedes v1 (8-bit, #
# NOP only, see isa_v1.py).                   #
###############################################

from amaranth.lib import enum

from address import *
from control import *
from fields import *

# Register / program counter operations.
class RegOp( enum.Enum, shape = 2 ):
  NOTHING = 0b00
  LOAD    = 0b01
  INC     = 0b10
  DEC     = 0b11

# Sources which can drive address bus 1.
class AddrBus1( enum.Enum, shape = 3 ):
  NONE = 0b000
  PC   = 0b001
  SP   = 0b010
  R1   = 0b011
  R2   = 0b100
  R3   = 0b101
  R4   = 0b110

# Sources which can drive the main bus.
class MainBus( enum.Enum, shape = 4 ):
  NONE  = 0b0000
  FETCH = 0b0001
  R1    = 0b0010
  R2    = 0b0011
  R3    = 0b0100
  R4    = 0b0101
  PC    = 0b0110
  SP    = 0b0111

# Control word layout: [ field, bits ]
#   1:0   PC load / increment / decrement
#   4:2   address bus 1 source
#   5     suppress instruction latch (fetched word is an operand)
#   6     halt the clock
#   11:8  main bus source
#   17:16 R1 load / increment / decrement (load latches the main bus)
#   19:18 R2 load / increment / decrement
#   21:20 R3 load / increment / decrement
#   23:22 R4 load / increment / decrement
#   25:24 SP load / increment / decrement
#   32    clear carry flag
#   33    set carry flag
#   40    write main bus to memory at address bus 1
PC             = Field( "pc", 0, RegOp )
ADDR_BUS_1     = Field( "addr_bus_1", 2, AddrBus1 )
INSTR_SUPPRESS = Field( "instr_suppress", 5 )
HALT           = Field( "halt", 6 )
MAIN_BUS       = Field( "main_bus", 8, MainBus )
R1             = Field( "r1", 16, RegOp )
R2             = Field( "r2", 18, RegOp )
R3             = Field( "r3", 20, RegOp )
R4             = Field( "r4", 22, RegOp )
SP             = Field( "sp", 24, RegOp )
CARRY_CLEAR    = Field( "carry_clear", 32 )
CARRY_SET      = Field( "carry_set", 33 )
MEM_WRITE      = Field( "mem_write", 40 )

LAYOUT = Layout( "v5", 64, [
  PC, ADDR_BUS_1, INSTR_SUPPRESS, HALT, MAIN_BUS,
  R1, R2, R3, R4, SP, CARRY_CLEAR, CARRY_SET, MEM_WRITE,
] )

# ROM address: [ 14:12 flags | 11:0 opcode ]
ADDRESS_MAP = AddressMap( 15, opcode_shift = 0, opcode_width = 12,
                          flags_shift = 12, flags_width = 3 )
ROM_SIZE = ADDRESS_MAP.size

# Address flag bits.
FLAG_CONDITION_FAILED = 0b001
FLAG_CARRY            = 0b010
FLAG_ZERO             = 0b100

# Positioned field values.
PC_DO_NOTHING         = PC( RegOp.NOTHING )
PC_LOAD               = PC( RegOp.LOAD )
PC_INC                = PC( RegOp.INC )
PC_DEC                = PC( RegOp.DEC )
ADDR_BUS_1_ASSERT_PC  = ADDR_BUS_1( AddrBus1.PC )
MAIN_BUS_ASSERT_FETCH = MAIN_BUS( MainBus.FETCH )
INSTR_SUPPRESSED      = INSTR_SUPPRESS()
CLOCK_HALT            = HALT()
CARRY_FLAG_CLEAR      = CARRY_CLEAR()
CARRY_FLAG_SET        = CARRY_SET()
MEM_WRITE_ENABLE      = MEM_WRITE()

# Convenience aliases.
IDLE           = ADDR_BUS_1_ASSERT_PC | PC_INC
FETCH_SUPPRESS = MAIN_BUS_ASSERT_FETCH | INSTR_SUPPRESSED

# Registers by index: [ name, field, address bus 1 source,
#                       main bus source ]
REGS = [
  [ "R1", R1, AddrBus1.R1, MainBus.R1 ],
  [ "R2", R2, AddrBus1.R2, MainBus.R2 ],
  [ "R3", R3, AddrBus1.R3, MainBus.R3 ],
  [ "R4", R4, AddrBus1.R4, MainBus.R4 ],
  [ "SP", SP, AddrBus1.SP, MainBus.SP ],
]
GP_REGS = REGS[ :4 ]

# ISA overview: (opcodes are 12 bits wide; 'n', 'd', 's' are register
# indices into REGS. 'C' = conditional, 'I' = trailing immediate.)
#   0x000:       NOP          (do nothing, advance the PC)
#   0x001:       HLT          (stop the clock)
#   0x010:       CLC      C   (clear carry flag)
#   0x011:       STC      C   (set carry flag)
#   0x100+n:     MOV n, # C I (load an immediate into R1-R4, SP)
#   0x110+d*4+s: MOV d, s C   (copy one register into another)
#   0x120+n:     INC n    C   (increment R1-R4, SP)
#   0x128+n:     DEC n    C   (decrement R1-R4, SP)
#   0x130+d*4+s: LD d, [s] C  (load from memory)
#   0x140+d*4+s: ST [d], s C  (store to memory)
#   0x200:       JMP #    C I (jump to an immediate address)
#   0x201+n:     JMP n    C   (jump to an address held in R1-R4)
# CPU operation definitions: [ opcode, name ]
OP_NOP    = [ 0x000, "NOP" ]
OP_HLT    = [ 0x001, "HLT" ]
OP_CLC    = [ 0x010, "CLC" ]
OP_STC    = [ 0x011, "STC" ]
OP_MOVI   = [ 0x100, "MOV" ]
OP_MOV    = [ 0x110, "MOV" ]
OP_INC    = [ 0x120, "INC" ]
OP_DEC    = [ 0x128, "DEC" ]
OP_LD     = [ 0x130, "LD" ]
OP_ST     = [ 0x140, "ST" ]
OP_JMPI   = [ 0x200, "JMP" ]
OP_JMP    = [ 0x201, "JMP" ]

# Helper methods to generate the control word rule for each instruction.
# No-op: just keep fetching.
def NOP():
  return Instruction( OP_NOP[ 0 ], OP_NOP[ 1 ], IDLE )
# Halt: hold the PC on the address bus and stop the clock.
def HLT():
  return Instruction( OP_HLT[ 0 ], OP_HLT[ 1 ],
                      ADDR_BUS_1_ASSERT_PC | CLOCK_HALT )
# Carry flag ops: CLC, STC
def CLC():
  return Instruction( OP_CLC[ 0 ], OP_CLC[ 1 ], IDLE | CARRY_FLAG_CLEAR,
                      conditional = True )
def STC():
  return Instruction( OP_STC[ 0 ], OP_STC[ 1 ], IDLE | CARRY_FLAG_SET,
                      conditional = True )
# Load immediate: the next word is fetched into Rn and skipped over.
def MOVI( n ):
  name, reg, _, _ = REGS[ n ]
  return Instruction( OP_MOVI[ 0 ] + n, "%s %s, #imm"%( OP_MOVI[ 1 ], name ),
                      IDLE | FETCH_SUPPRESS | reg( RegOp.LOAD ),
                      conditional = True, immediate = True )
# Register to register copy: Rd = Rs
def MOV( d, s ):
  dname, dreg, _, _ = GP_REGS[ d ]
  sname, _, _, sbus = GP_REGS[ s ]
  return Instruction( OP_MOV[ 0 ] | ( d << 2 ) | s,
                      "%s %s, %s"%( OP_MOV[ 1 ], dname, sname ),
                      IDLE | MAIN_BUS( sbus ) | dreg( RegOp.LOAD ),
                      conditional = True )
# Increment / decrement ops: INC, DEC
def INC( n ):
  name, reg, _, _ = REGS[ n ]
  return Instruction( OP_INC[ 0 ] + n, "%s %s"%( OP_INC[ 1 ], name ),
                      IDLE | reg( RegOp.INC ), conditional = True )
def DEC( n ):
  name, reg, _, _ = REGS[ n ]
  return Instruction( OP_DEC[ 0 ] + n, "%s %s"%( OP_DEC[ 1 ], name ),
                      IDLE | reg( RegOp.DEC ), conditional = True )
# Memory ops: LD, ST (Rs / Rd drives the address bus instead of the
# PC for one cycle, so the fetched word is never an instruction.)
def LD( d, s ):
  dname, dreg, _, _ = GP_REGS[ d ]
  sname, _, saddr, _ = GP_REGS[ s ]
  return Instruction( OP_LD[ 0 ] | ( d << 2 ) | s,
                      "%s %s, [%s]"%( OP_LD[ 1 ], dname, sname ),
                      ADDR_BUS_1( saddr ) | FETCH_SUPPRESS |
                      dreg( RegOp.LOAD ),
                      conditional = True )
def ST( d, s ):
  dname, _, daddr, _ = GP_REGS[ d ]
  sname, _, _, sbus = GP_REGS[ s ]
  return Instruction( OP_ST[ 0 ] | ( d << 2 ) | s,
                      "%s [%s], %s"%( OP_ST[ 1 ], dname, sname ),
                      ADDR_BUS_1( daddr ) | MAIN_BUS( sbus ) |
                      MEM_WRITE_ENABLE | INSTR_SUPPRESSED,
                      conditional = True )
# Jump ops: the PC is loaded instead of incremented.
def JMPI():
  return Instruction( OP_JMPI[ 0 ], "%s #imm"%( OP_JMPI[ 1 ] ),
                      ADDR_BUS_1_ASSERT_PC | FETCH_SUPPRESS | PC_LOAD,
                      conditional = True, immediate = True )
def JMP( n ):
  name, _, _, bus = GP_REGS[ n ]
  return Instruction( OP_JMP[ 0 ] + n, "%s %s"%( OP_JMP[ 1 ], name ),
                      ADDR_BUS_1_ASSERT_PC | MAIN_BUS( bus ) | PC_LOAD |
                      INSTR_SUPPRESSED,
                      conditional = True )

# Collect the full instruction table.
def instruction_set():
  insns = InstructionSet( ADDRESS_MAP.opcode_width )
  insns.add( NOP() )
  insns.add( HLT() )
  insns.add( CLC() )
  insns.add( STC() )
  for n in range( len( REGS ) ):
    insns.add( MOVI( n ) )
    insns.add( INC( n ) )
    insns.add( DEC( n ) )
  for d in range( len( GP_REGS ) ):
    for s in range( len( GP_REGS ) ):
      if d != s:
        insns.add( MOV( d, s ) )
      insns.add( LD( d, s ) )
      insns.add( ST( d, s ) )
  insns.add( JMPI() )
  for n in range( len( GP_REGS ) ):
    insns.add( JMP( n ) )
  return insns

INSTRUCTIONS = instruction_set()

MICROCODE = Microcode( "v5", LAYOUT, ADDRESS_MAP, INSTRUCTIONS,
                       idle = IDLE, suppress = INSTR_SUPPRESSED,
                       condition = FLAG_CONDITION_FAILED )
