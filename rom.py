import logging

from amaranth import *
from amaranth.lib.memory import Memory
from amaranth.sim import Simulator

logger = logging.getLogger( __name__ )

####################################
# ROM module: one byte-wide EEPROM #
# chip holding one control plane.  #
####################################

class ROM( Elaboratable ):
  def __init__( self, data ):
    # Record size.
    self.size = len( data )
    # Address bits to select up to `len( data )` bytes.
    self.addr = Signal( range( self.size ), init = 0 )
    # Data byte output.
    self.data = Signal( 8, init = 0x00 )
    # Data storage.
    self.mem  = Memory( shape = unsigned( 8 ), depth = self.size,
                        init = list( data ) )

  def elaborate( self, platform ):
    # Core ROM module.
    m = Module()
    m.submodules.mem = self.mem

    # EEPROM reads are asynchronous: output follows the address.
    rd_port = self.mem.read_port( domain = "comb" )
    m.d.comb += [
      rd_port.addr.eq( self.addr ),
      self.data.eq( rd_port.data ),
    ]

    # End of ROM module definition.
    return m

################################################
# Control store: N ROM chips sharing one       #
# address bus, each driving one byte of the    #
# control word (least significant plane first) #
################################################

class ControlStore( Elaboratable ):
  def __init__( self, planes ):
    # Every chip must cover the same address space.
    sizes = set( len( plane ) for plane in planes )
    if len( sizes ) != 1:
      raise ValueError( "byte planes differ in size: %s"
                        %( sorted( sizes ) ) )
    self.roms = [ ROM( plane ) for plane in planes ]
    self.size = sizes.pop()
    # Shared address input.
    self.addr = Signal( range( self.size ), init = 0 )
    # Full control word output.
    self.word = Signal( 8 * len( planes ), init = 0 )

  def elaborate( self, platform ):
    m = Module()

    for i, rom in enumerate( self.roms ):
      m.submodules[ "ctrl%d"%( i + 1 ) ] = rom
      m.d.comb += [
        rom.addr.eq( self.addr ),
        self.word.word_select( i, 8 ).eq( rom.data ),
      ]

    return m

#####################################
# Check ROM images against the      #
# generator through the chip model. #
#####################################

def verify( microcode, planes, addresses = None ):
  if addresses is None:
    addresses = range( microcode.size )
  dut = ControlStore( planes )
  mismatches = []

  async def testbench( ctx ):
    for addr in addresses:
      ctx.set( dut.addr, addr )
      expected = microcode( addr )
      actual = ctx.get( dut.word )
      if actual != expected:
        logger.debug( "0x%04X: expected 0x%0*X, got 0x%0*X", addr,
                      microcode.planes * 2, expected,
                      microcode.planes * 2, actual )
        mismatches.append( ( addr, expected, actual ) )

  sim = Simulator( dut )
  sim.add_testbench( testbench )
  sim.run()
  return mismatches
