from functools import reduce

from amaranth import Shape

##########################################
# Control word field layout definitions. #
##########################################

class LayoutError( Exception ):
  pass

# A (possibly partial) control word: the positioned value, plus the
# mask of every bit that some field setting has claimed.
class ControlWord:
  def __init__( self, value = 0, mask = 0 ):
    if value & ~mask:
      raise LayoutError( "value 0x%X sets bits outside of mask 0x%X"
                         %( value, mask ) )
    self.value = value
    self.mask  = mask

  # Checked composition: two settings may never claim the same bits.
  def __or__( self, other ):
    if not isinstance( other, ControlWord ):
      return NotImplemented
    if self.mask & other.mask:
      raise LayoutError( "overlapping control word bits: 0x%X"
                         %( self.mask & other.mask ) )
    return ControlWord( self.value | other.value,
                        self.mask | other.mask )

  def __int__( self ):
    return self.value

  def __index__( self ):
    return self.value

  def __eq__( self, other ):
    if isinstance( other, ControlWord ):
      return self.value == other.value
    if isinstance( other, int ):
      return self.value == other
    return NotImplemented

  def __hash__( self ):
    return hash( self.value )

  def __repr__( self ):
    return "ControlWord(0x%X)"%( self.value )

# Bitwise OR of any number of control words.
def combine( *words ):
  return reduce( lambda a, b: a | b, words, ControlWord() )

# A named, fixed-position bit field. 'values' is an amaranth enum
# with an explicit shape; fields without one are plain flag bits.
class Field:
  def __init__( self, name, offset, values = None, width = None,
                shares = () ):
    self.name   = name
    self.offset = offset
    self.values = values
    if values is not None:
      self.width = Shape.cast( values ).width
    elif width is not None:
      self.width = width
    else:
      self.width = 1
    # Names of fields which are allowed to alias these bit positions.
    self.shares = tuple( shares )

  @property
  def mask( self ):
    return ( ( 1 << self.width ) - 1 ) << self.offset

  # Position a legal value in the control word.
  def __call__( self, value = 1 ):
    if self.values is not None:
      if not isinstance( value, self.values ):
        raise ValueError( "%r is not a legal value for field '%s'"
                          %( value, self.name ) )
      raw = value.value
    else:
      if not isinstance( value, int ) or value < 0 or \
         value >= ( 1 << self.width ):
        raise ValueError( "%r does not fit in field '%s'"
                          %( value, self.name ) )
      raw = value
    return ControlWord( raw << self.offset, self.mask )

  # Read this field's setting back out of a control word.
  def extract( self, word ):
    raw = ( int( word ) >> self.offset ) & ( ( 1 << self.width ) - 1 )
    if self.values is not None:
      try:
        return self.values( raw )
      except ValueError:
        pass
    return raw

  def overlaps( self, other ):
    return ( self.mask & other.mask ) != 0

  def __repr__( self ):
    return "Field(%s, bits %d:%d)"%( self.name,
                                     self.offset + self.width - 1,
                                     self.offset )

##################################
# Complete control word layouts: #
##################################

class Layout:
  def __init__( self, name, width, fields ):
    self.name   = name
    self.width  = width
    self.fields = {}
    for field in fields:
      if field.name in self.fields:
        raise LayoutError( "duplicate field '%s'"%( field.name ) )
      if field.offset < 0 or field.offset + field.width > width:
        raise LayoutError( "field '%s' does not fit in a %d-bit word"
                           %( field.name, width ) )
      for other in self.fields.values():
        if field.overlaps( other ) and not self.aliased( field, other ):
          raise LayoutError( "field '%s' overlaps field '%s'"
                             %( field.name, other.name ) )
      self.fields[ field.name ] = field

  @staticmethod
  def aliased( a, b ):
    return ( b.name in a.shares ) or ( a.name in b.shares )

  # Number of byte-wide ROM chips needed to hold one word.
  @property
  def planes( self ):
    return ( self.width + 7 ) // 8

  def __getitem__( self, name ):
    return self.fields[ name ]

  def __iter__( self ):
    return iter( sorted( self.fields.values(), key = lambda f: f.offset ) )

  # Make sure a composed word only touches bits owned by this layout.
  def check( self, word ):
    owned = 0
    for field in self.fields.values():
      owned |= field.mask
    if int( word ) & ~owned:
      raise LayoutError( "%r sets bits outside of layout '%s'"
                         %( word, self.name ) )
    return word

  # Field name -> setting, for every field which is not all-zero.
  def decode( self, word ):
    settings = {}
    for field in self:
      if int( word ) & field.mask:
        settings[ field.name ] = field.extract( word )
    return settings

  # Human-readable bit map, one line per field.
  def describe( self ):
    lines = [ "%s: %d-bit control word, %d byte plane(s)"
              %( self.name, self.width, self.planes ) ]
    for field in self:
      if field.width == 1:
        bits = "%d"%( field.offset )
      else:
        bits = "%d:%d"%( field.offset + field.width - 1, field.offset )
      if field.values is not None:
        legal = ", ".join( member.name for member in field.values )
      else:
        legal = "flag"
      lines.append( "  bits %-6s %-16s %s"%( bits, field.name, legal ) )
    return lines
