##################################################
# ROM address slicing: opcode, condition flags   #
# and "don't care" bits. One map per revision,   #
# shared by the generator and by any tooling.    #
##################################################

class AddressMap:
  def __init__( self, width, opcode_shift, opcode_width,
                flags_shift, flags_width ):
    self.width        = width
    self.opcode_shift = opcode_shift
    self.opcode_width = opcode_width
    self.flags_shift  = flags_shift
    self.flags_width  = flags_width
    if opcode_shift < 0 or opcode_shift + opcode_width > width:
      raise ValueError( "opcode bits do not fit in a %d-bit address"
                        %( width ) )
    if flags_shift < 0 or flags_shift + flags_width > width:
      raise ValueError( "flag bits do not fit in a %d-bit address"
                        %( width ) )
    if self.opcode_mask & self.flags_mask:
      raise ValueError( "opcode and flag bits overlap" )

  # Number of addressable ROM locations.
  @property
  def size( self ):
    return 1 << self.width

  @property
  def opcode_mask( self ):
    return ( ( 1 << self.opcode_width ) - 1 ) << self.opcode_shift

  @property
  def flags_mask( self ):
    return ( ( 1 << self.flags_width ) - 1 ) << self.flags_shift

  # Whatever is left over does not influence the control word.
  @property
  def dont_care_mask( self ):
    return ( self.size - 1 ) & ~( self.opcode_mask | self.flags_mask )

  def opcode( self, addr ):
    return ( addr & self.opcode_mask ) >> self.opcode_shift

  def flags( self, addr ):
    return ( addr & self.flags_mask ) >> self.flags_shift

  # Build an address back up from its parts.
  def address( self, opcode, flags = 0, extra = 0 ):
    if opcode >> self.opcode_width:
      raise ValueError( "opcode 0x%X is wider than %d bits"
                        %( opcode, self.opcode_width ) )
    if flags >> self.flags_width:
      raise ValueError( "flags 0x%X are wider than %d bits"
                        %( flags, self.flags_width ) )
    if extra & ~self.dont_care_mask:
      raise ValueError( "0x%X is not a don't-care bit pattern"%( extra ) )
    return ( ( opcode << self.opcode_shift ) |
             ( flags << self.flags_shift ) | extra )

  # Every address which decodes to the given opcode.
  def addresses( self, opcode ):
    for flags in range( 1 << self.flags_width ):
      # Walk every subset of the don't-care bits.
      extra = self.dont_care_mask
      while True:
        yield self.address( opcode, flags, extra )
        if extra == 0:
          break
        extra = ( extra - 1 ) & self.dont_care_mask

  def describe( self ):
    def bits( shift, width ):
      if width == 0:
        return "none"
      return "%d:%d"%( shift + width - 1, shift )
    dont_care = [ b for b in range( self.width )
                  if self.dont_care_mask & ( 1 << b ) ]
    return [
      "%d-bit address, %d locations"%( self.width, self.size ),
      "  opcode     bits %s"%( bits( self.opcode_shift,
                                      self.opcode_width ) ),
      "  flags      bits %s"%( bits( self.flags_shift, self.flags_width ) ),
      "  don't care bits %s"%( ", ".join( "%d"%( b ) for b in dont_care )
                               or "none" ),
    ]
